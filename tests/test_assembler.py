"""Tests for the segment/comment interleaving state machine.

WHY: The assembler is where code text can be lost or duplicated: gaps,
segments and comments are consumed by three cursors that must stay in
step. Whitespace trimming at block edges and the stall recovery are the
rules most easily broken by a refactor.

HOW: Small hand-built buffers pin down each transition (gap, segment,
comment, forced advance). A seeded random sweep feeds partitioner
output through the assembler and checks that, without prose, the code
runs reproduce the buffer exactly.
"""

import logging
import random

import pytest

from cire.core.assembler import _advance_one, assemble_blocks, assemble_document, run_kind
from cire.core.ir import (
    AnnotatedRun,
    Annotation,
    CodeBlock,
    Comment,
    Position,
    ProseBlock,
    RunKind,
    Segment,
    Span,
    TextRun,
    Token,
)
from cire.core.partitioner import partition_tokens
from cire.core.positions import sort_tokens


def _span(l1, c1, l2, c2):
    return Span(Position(l1, c1), Position(l2, c2))


def _seg(l1, c1, l2, c2, **kwargs):
    return Segment(_span(l1, c1, l2, c2), Annotation(**kwargs))


class TestRunKind:
    """Decoration precedence: definition, reference, highlight, plain."""

    def test_definition_beats_everything(self):
        ann = Annotation(is_definition=True, is_reference=True, highlight_class="kw")
        assert run_kind(ann) == RunKind.DEFINITION

    def test_reference_beats_highlight(self):
        assert run_kind(Annotation(is_reference=True, highlight_class="kw")) == RunKind.REFERENCE

    def test_highlight(self):
        assert run_kind(Annotation(highlight_class="kw")) == RunKind.HIGHLIGHT

    def test_plain(self):
        assert run_kind(Annotation(doc_text=("only docs",))) == RunKind.PLAIN


class TestAssembleBlocks:
    """Block structure for representative buffers."""

    def test_single_definition_in_code(self):
        lines = ["import os", "alpha = 1", "print(alpha)"]
        segment = _seg(1, 0, 1, 5, symbol="a", is_definition=True)

        blocks = assemble_blocks([segment], [], lines)

        assert blocks == [CodeBlock(runs=(
            TextRun("import os\n"),
            AnnotatedRun("alpha", segment, RunKind.DEFINITION),
            TextRun(" = 1\nprint(alpha)"),
        ))]

    def test_token_inside_comment_never_renders(self):
        lines = ["", "", "# hello ok"]
        comment = Comment(_span(2, 0, 2, 10), "hello")
        segment = _seg(2, 2, 2, 6, highlight_class="kw")

        assert assemble_blocks([segment], [comment], lines) == [ProseBlock("hello")]

    def test_no_tokens_no_comments(self):
        lines = ["a = 1", "b = 2", "c = 3"]
        blocks = assemble_blocks([], [], lines)
        assert blocks == [CodeBlock(runs=(TextRun("a = 1\nb = 2\nc = 3"),))]

    def test_empty_buffer_yields_no_blocks(self):
        assert assemble_blocks([], [], [""]) == []

    def test_whitespace_trimmed_around_prose(self):
        lines = ["x = 1", "", "# note", "", "y = 2"]
        comment = Comment(_span(2, 0, 2, 6), "note")

        blocks = assemble_blocks([], [comment], lines)

        assert blocks == [
            CodeBlock(runs=(TextRun("x = 1"),)),
            ProseBlock("note"),
            CodeBlock(runs=(TextRun("y = 2"),)),
        ]

    def test_leading_whitespace_trimmed_at_document_start(self):
        lines = ["", "  x = 1"]
        assert assemble_blocks([], [], lines) == [CodeBlock(runs=(TextRun("x = 1"),))]

    def test_interior_whitespace_kept(self):
        lines = ["def f():", "", "    return 1"]
        segment = _seg(2, 4, 2, 10, highlight_class="keyword")
        blocks = assemble_blocks([segment], [], lines)
        assert blocks[0].text == "def f():\n\n    return 1"

    def test_comment_wins_tie_with_segment(self):
        lines = ["# c", "x"]
        comment = Comment(_span(0, 0, 0, 3), "c")
        segment = _seg(0, 0, 0, 3, highlight_class="comment")

        blocks = assemble_blocks([segment], [comment], lines)

        assert blocks == [ProseBlock("c"), CodeBlock(runs=(TextRun("x"),))]

    def test_consecutive_comments_give_consecutive_prose(self):
        lines = ["# a", "# b"]
        comments = [Comment(_span(0, 0, 0, 3), "a"), Comment(_span(1, 0, 1, 3), "b")]
        assert assemble_blocks([], comments, lines) == [ProseBlock("a"), ProseBlock("b")]

    def test_segment_at_block_start_is_not_trimmed(self):
        lines = ["# c", "  pad"]
        comment = Comment(_span(0, 0, 0, 3), "c")
        segment = _seg(1, 0, 1, 5, highlight_class="x")

        blocks = assemble_blocks([segment], [comment], lines)

        assert blocks == [
            ProseBlock("c"),
            CodeBlock(runs=(AnnotatedRun("  pad", segment, RunKind.HIGHLIGHT),)),
        ]


class TestTextConservation:
    """Without prose, the runs reproduce the buffer exactly."""

    @pytest.mark.parametrize("seed", range(10))
    def test_random_segments_reproduce_buffer(self, seed):
        rng = random.Random(seed)
        lines = ["alpha = beta(1)", "gamma = [alpha, beta]", "print(gamma)"]
        tokens = []
        for _ in range(rng.randint(0, 8)):
            line = rng.randrange(len(lines))
            start = rng.randint(0, len(lines[line]))
            end = rng.randint(start, len(lines[line]))
            tokens.append(Token(
                _span(line, start, line, end),
                Annotation(highlight_class=rng.choice(["", "k"]), symbol=rng.choice(["", "s"])),
            ))
        segments = partition_tokens(sort_tokens(tokens))

        blocks = assemble_blocks(segments, [], lines)

        assert "".join(b.text for b in blocks) == "\n".join(lines)


class TestForcedAdvance:
    """Inconsistent input is survived with a warning."""

    def test_segment_straddling_comment_end_warns(self, caplog):
        lines = ["abcdef"]
        comment = Comment(_span(0, 0, 0, 2), "ab")
        segment = _seg(0, 1, 0, 4, highlight_class="x")

        with caplog.at_level(logging.WARNING, logger="cire.core.assembler"):
            blocks = assemble_blocks([segment], [comment], lines)

        assert blocks == [ProseBlock("ab")]
        assert "forcing advance" in caplog.text

    def test_advance_moves_one_column(self):
        assert _advance_one(Position(0, 0), ["ab", "cd"], Position(1, 2)) == Position(0, 1)

    def test_advance_wraps_to_next_line(self):
        assert _advance_one(Position(0, 2), ["ab", "cd"], Position(1, 2)) == Position(1, 0)

    def test_advance_clamps_to_buffer_end(self):
        assert _advance_one(Position(1, 2), ["ab", "cd"], Position(1, 2)) == Position(1, 2)


class TestAssembleDocument:
    def test_metadata(self):
        lines = ["x = 1", ""]
        document = assemble_document([], [], lines, source_filename="x.py")
        assert document.source_filename == "x.py"
        assert document.line_count == 2
        assert document.code_blocks == [CodeBlock(runs=(TextRun("x = 1\n"),))]
        assert document.prose_blocks == []
