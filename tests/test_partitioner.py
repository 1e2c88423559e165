"""Tests for the sweep-line token partitioner.

WHY: The partition is the only place where overlapping producer output is
flattened. Coverage, ordering and the merge rules must hold for every
input, not just the handful of shapes real analyzers emit.

HOW: Hand-built cases pin down the merge rules and boundary handling; a
seeded random sweep checks coverage and per-column merge results against
a brute-force model.
"""

import random

import pytest

from cire.core import partitioner
from cire.core.ir import Annotation, Position, Span, Token
from cire.core.partitioner import PartitionError, merge_annotations, partition_tokens
from cire.core.positions import sort_tokens


def _tok(l1, c1, l2, c2, **kwargs):
    if "doc_text" in kwargs:
        kwargs["doc_text"] = tuple(kwargs["doc_text"])
    return Token(Span(Position(l1, c1), Position(l2, c2)), Annotation(**kwargs))


def _spans(segments):
    return [(s.span.start.line, s.span.start.column, s.span.end.line, s.span.end.column)
            for s in segments]


class TestBasicPartition:
    """Shapes with a known, hand-checked result."""

    def test_empty_input(self):
        assert partition_tokens([]) == []

    def test_single_definition(self):
        segments = partition_tokens([_tok(1, 0, 1, 5, symbol="a", is_definition=True)])
        assert _spans(segments) == [(1, 0, 1, 5)]
        assert segments[0].annotation.symbol == "a"
        assert segments[0].annotation.is_definition

    def test_nested_reference_splits_outer_token(self):
        tokens = sort_tokens([
            _tok(1, 5, 1, 10, is_reference=True, symbol="v"),
            _tok(1, 0, 1, 15, highlight_class="function"),
        ])
        segments = partition_tokens(tokens)

        assert _spans(segments) == [(1, 0, 1, 5), (1, 5, 1, 10), (1, 10, 1, 15)]
        outer, inner, tail = (s.annotation for s in segments)
        assert outer == Annotation(highlight_class="function")
        assert inner == Annotation(symbol="v", is_reference=True, highlight_class="function")
        assert tail == Annotation(highlight_class="function")

    def test_gaps_are_not_emitted(self):
        tokens = [_tok(0, 0, 0, 2, highlight_class="a"), _tok(0, 5, 0, 7, highlight_class="b")]
        assert _spans(partition_tokens(tokens)) == [(0, 0, 0, 2), (0, 5, 0, 7)]

    def test_adjacent_tokens_stay_separate(self):
        tokens = [_tok(0, 0, 0, 3, highlight_class="a"), _tok(0, 3, 0, 5, highlight_class="b")]
        segments = partition_tokens(tokens)
        assert _spans(segments) == [(0, 0, 0, 3), (0, 3, 0, 5)]
        assert [s.annotation.highlight_class for s in segments] == ["a", "b"]

    def test_multi_line_token(self):
        tokens = sort_tokens([
            _tok(0, 4, 2, 3, highlight_class="string"),
            _tok(1, 0, 1, 2, symbol="x", is_reference=True),
        ])
        assert _spans(partition_tokens(tokens)) == [
            (0, 4, 1, 0), (1, 0, 1, 2), (1, 2, 2, 3),
        ]


class TestMergeRules:
    """Union semantics of overlapping annotations."""

    def test_last_non_empty_symbol_wins(self):
        tokens = [
            _tok(0, 0, 0, 4, symbol="first"),
            _tok(0, 0, 0, 4, symbol="second"),
            _tok(0, 0, 0, 4, highlight_class="kw"),
        ]
        (segment,) = partition_tokens(tokens)
        assert segment.annotation.symbol == "second"
        assert segment.annotation.highlight_class == "kw"

    def test_flags_are_or_ed(self):
        tokens = [
            _tok(0, 0, 0, 4, is_definition=True),
            _tok(0, 0, 0, 4, is_reference=True),
        ]
        (segment,) = partition_tokens(tokens)
        assert segment.annotation.is_definition
        assert segment.annotation.is_reference

    def test_doc_text_concatenated_without_dedup(self):
        tokens = [
            _tok(0, 0, 0, 4, doc_text=["same"]),
            _tok(0, 0, 0, 4),
            _tok(0, 0, 0, 4, doc_text=["same", "more"]),
        ]
        (segment,) = partition_tokens(tokens)
        assert segment.annotation.doc_text == ("same", "same", "more")

    def test_merge_of_nothing_is_empty_annotation(self):
        assert merge_annotations([]) == Annotation()


class TestDegenerateInput:
    """Zero-length tokens only split; inverted tokens are dropped."""

    def test_zero_length_token_splits_outer_token(self):
        tokens = sort_tokens([_tok(0, 0, 0, 10, highlight_class="a"), _tok(0, 5, 0, 5)])
        assert _spans(partition_tokens(tokens)) == [(0, 0, 0, 5), (0, 5, 0, 10)]

    def test_zero_length_annotation_never_merged(self):
        outer = _tok(0, 0, 0, 6, highlight_class="a")
        tokens = sort_tokens([outer, _tok(0, 3, 0, 3, symbol="ghost", is_definition=True)])
        segments = partition_tokens(tokens)
        assert _spans(segments) == [(0, 0, 0, 3), (0, 3, 0, 6)]
        assert all(s.annotation == outer.annotation for s in segments)

    def test_zero_length_token_at_outer_start(self):
        tokens = sort_tokens([_tok(0, 0, 0, 4, highlight_class="a"), _tok(0, 0, 0, 0, symbol="x")])
        assert _spans(partition_tokens(tokens)) == [(0, 0, 0, 4)]

    def test_only_degenerate_tokens(self):
        assert partition_tokens([_tok(2, 1, 2, 1, symbol="x")]) == []

    def test_inverted_token_is_dropped(self):
        tokens = sort_tokens([
            _tok(0, 0, 0, 2, highlight_class="a"),
            _tok(0, 8, 0, 3, highlight_class="bad"),
        ])
        assert _spans(partition_tokens(tokens)) == [(0, 0, 0, 2)]


class TestProperties:
    """Coverage, ordering and idempotence over generated inputs."""

    def test_non_overlapping_input_is_unchanged(self):
        tokens = [
            _tok(0, 0, 0, 3, symbol="a", is_definition=True),
            _tok(0, 4, 0, 9, highlight_class="string"),
            _tok(1, 0, 1, 2, symbol="a", is_reference=True, doc_text=["doc"]),
        ]
        segments = partition_tokens(tokens)
        assert [(s.span, s.annotation) for s in segments] == [(t.span, t.annotation) for t in tokens]

    def test_partitioning_twice_is_stable(self):
        tokens = sort_tokens([
            _tok(0, 0, 0, 10, highlight_class="x"),
            _tok(0, 2, 0, 4, symbol="s"),
            _tok(0, 3, 0, 8, doc_text=["d"]),
        ])
        once = partition_tokens(tokens)
        twice = partition_tokens([Token(s.span, s.annotation) for s in once])
        assert twice == once

    @pytest.mark.parametrize("seed", range(20))
    def test_random_tokens_match_brute_force(self, seed):
        rng = random.Random(seed)
        width = 30
        tokens = []
        for i in range(rng.randint(1, 12)):
            start = rng.randint(0, width - 1)
            end = rng.randint(start, width)
            tokens.append(_tok(
                0, start, 0, end,
                symbol=rng.choice(["", "s{}".format(i)]),
                highlight_class=rng.choice(["", "c{}".format(i)]),
                is_definition=rng.random() < 0.2,
                is_reference=rng.random() < 0.2,
                doc_text=rng.choice([[], ["d{}".format(i)]]),
            ))
        tokens = sort_tokens(tokens)
        segments = partition_tokens(tokens)

        for left, right in zip(segments, segments[1:]):
            assert left.span.start < left.span.end
            assert left.span.end <= right.span.start

        for column in range(width):
            covering = [t for t in tokens
                        if t.span.start.column <= column < t.span.end.column]
            hits = [s for s in segments
                    if s.span.start.column <= column < s.span.end.column]
            if not covering:
                assert hits == []
                continue
            assert len(hits) == 1
            ann = hits[0].annotation
            symbols = [t.annotation.symbol for t in covering if t.annotation.symbol]
            classes = [t.annotation.highlight_class for t in covering if t.annotation.highlight_class]
            assert ann.symbol == (symbols[-1] if symbols else "")
            assert ann.highlight_class == (classes[-1] if classes else "")
            assert ann.is_definition == any(t.annotation.is_definition for t in covering)
            assert ann.is_reference == any(t.annotation.is_reference for t in covering)
            assert ann.doc_text == tuple(d for t in covering for d in t.annotation.doc_text)


class TestInvariantViolation:
    """An impossible sweep state surfaces as PartitionError."""

    def test_missing_event_raises(self, monkeypatch):
        monkeypatch.setattr(partitioner, "_next_event", lambda tokens, index, active: None)
        with pytest.raises(PartitionError, match="sweep stalled"):
            partition_tokens([_tok(0, 0, 0, 1, highlight_class="a")])
