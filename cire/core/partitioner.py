"""Sweep-line partitioning of overlapping tokens into disjoint segments.

WHY: Highlighting, symbol indexes and hover providers annotate the same
characters independently, so their tokens nest and overlap arbitrarily.
Renderers can only emit one decoration per character, so the overlapping
tokens must be cut into a flat, ordered partition whose pieces carry the
merged attributes of every token covering them.

HOW: A sweep line walks the sorted tokens. At each event position (the
next token start or the earliest end among active tokens) the span since
the previous event is emitted with the merged annotation of the active
tokens, then tokens starting here are activated and tokens ending here
are deactivated.

RULES:
- Input must be sorted by (start, end); see positions.sort_tokens
- Gaps covered by no token are never emitted
- Inverted tokens are dropped before the sweep
- A zero-length token is an event: it splits the segment around its
  position but is deactivated at once and never reaches merge()
- Activation happens before deactivation at each event
- Deactivation is a stable filter: survivor order drives merge()
- merge(): last non-empty symbol/highlight_class wins, flags are OR-ed,
  doc_text lists are concatenated in activation order
- An impossible sweep state raises PartitionError; nothing is suppressed
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from cire.core.ir import Annotation, Position, Segment, Span, Token


class PartitionError(RuntimeError):
    """Raised when the sweep reaches a state its invariants rule out.

    WHY: Silently producing a partial partition would break coverage
    guarantees downstream; callers must see the failure.

    RULES:
    - Only raised for internal invariant violations, never for malformed spans
    - Message includes the sweep position and remaining token count
    """


def merge_annotations(active: Sequence[Token]) -> Annotation:
    """Merge the annotations of the active tokens in activation order."""
    symbol = ""
    highlight_class = ""
    is_definition = False
    is_reference = False
    doc_text: List[str] = []

    for token in active:
        ann = token.annotation
        if ann.symbol:
            symbol = ann.symbol
        if ann.highlight_class:
            highlight_class = ann.highlight_class
        if ann.doc_text:
            doc_text.extend(ann.doc_text)
        is_definition = is_definition or ann.is_definition
        is_reference = is_reference or ann.is_reference

    return Annotation(
        symbol=symbol,
        is_definition=is_definition,
        is_reference=is_reference,
        highlight_class=highlight_class,
        doc_text=tuple(doc_text),
    )


def _earliest_end(active: Sequence[Token]) -> Position:
    return min(token.span.end for token in active)


def _next_event(tokens: Sequence[Token], index: int, active: Sequence[Token]) -> Optional[Position]:
    """Return the next start or end position, or None if nothing is left."""
    candidates: List[Position] = []
    if index < len(tokens):
        candidates.append(tokens[index].span.start)
    if active:
        candidates.append(_earliest_end(active))
    if not candidates:
        return None
    return min(candidates)


def partition_tokens(tokens: Sequence[Token]) -> List[Segment]:
    """Partition sorted, possibly overlapping tokens into disjoint segments.

    Args:
        tokens: Tokens sorted by start then end.

    Returns:
        Sorted, pairwise non-overlapping segments whose union is exactly
        the union of the input spans. Zero-length tokens only add
        boundaries.

    Raises:
        PartitionError: If the sweep reaches an unreachable state.
    """
    # Inverted spans would move the sweep backwards. Zero-length spans stay:
    # they activate and deactivate at the same event.
    tokens = [t for t in tokens if t.span.is_valid]
    if not tokens:
        return []

    segments: List[Segment] = []
    active: List[Token] = []
    cur_pos = tokens[0].span.start
    index = 0

    while index < len(tokens) or active:
        next_pos = _next_event(tokens, index, active)
        if next_pos is None:
            raise PartitionError(
                "sweep stalled at {} with {} tokens remaining".format(
                    cur_pos, len(tokens) - index
                )
            )

        if cur_pos < next_pos and active:
            segments.append(Segment(
                span=Span(cur_pos, next_pos),
                annotation=merge_annotations(active),
            ))

        while index < len(tokens) and tokens[index].span.start == next_pos:
            active.append(tokens[index])
            index += 1

        active = [t for t in active if t.span.end != next_pos]
        cur_pos = next_pos

    return segments
