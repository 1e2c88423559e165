"""Interleaving of code segments and comment prose into document blocks.

WHY: A literate view alternates between prose (the file's comments) and
code (everything else, decorated by the segment partition). Segments,
comments and the raw gaps between them come from three different sources
that must be walked in lockstep without losing or duplicating text.

HOW: An explicit state machine keeps one cursor and two read indices.
Each step first flushes the raw gap up to the next event (segment start,
comment start or end of buffer) as literal text, then resolves the event
at the cursor: a comment closes the open code block and becomes prose,
a segment becomes an annotated run. Code blocks are accumulated as lists
of runs and frozen into CodeBlock values when closed.

RULES:
- Comment beats segment when both start at the cursor
- Segments ending inside a comment's span are discarded, never rendered
- Leading whitespace is stripped from the first run after a block opens
  (document start or right after prose)
- Trailing whitespace is stripped from a gap that ends at a comment start
- Empty text never opens a code block
- A stalled cursor is force-advanced by one column with a warning; the
  run is never aborted
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from cire.core.ir import (
    AnnotatedRun,
    Annotation,
    Block,
    CodeBlock,
    Comment,
    Document,
    Position,
    ProseBlock,
    Run,
    RunKind,
    Segment,
    Span,
    TextRun,
)
from cire.core.positions import end_of_buffer, extract_text

logger = logging.getLogger(__name__)


def run_kind(annotation: Annotation) -> RunKind:
    """Pick the decoration for a segment; the first matching rule wins."""
    if annotation.is_definition:
        return RunKind.DEFINITION
    if annotation.is_reference:
        return RunKind.REFERENCE
    if annotation.highlight_class:
        return RunKind.HIGHLIGHT
    return RunKind.PLAIN


def _advance_one(pos: Position, lines: Sequence[str], buffer_end: Position) -> Position:
    """Move one column forward, wrapping past line ends and clamping at the buffer end."""
    nxt = Position(pos.line, pos.column + 1)
    if 0 <= nxt.line < len(lines) and nxt.column > len(lines[nxt.line]):
        nxt = Position(nxt.line + 1, 0)
    if nxt.line >= len(lines) or nxt > buffer_end:
        nxt = buffer_end
    return nxt


class _BlockBuilder:
    """Accumulates runs of the currently open code block."""

    def __init__(self) -> None:
        self.blocks: List[Block] = []
        self._runs: Optional[List[Run]] = None

    @property
    def is_open(self) -> bool:
        return self._runs is not None

    def add_run(self, run: Run) -> None:
        if self._runs is None:
            self._runs = []
        self._runs.append(run)

    def close(self) -> None:
        if self._runs:
            self.blocks.append(CodeBlock(runs=tuple(self._runs)))
        self._runs = None

    def add_prose(self, content: str) -> None:
        self.close()
        self.blocks.append(ProseBlock(content=content))


def assemble_blocks(
    segments: Sequence[Segment],
    comments: Sequence[Comment],
    lines: Sequence[str],
    buffer_end: Optional[Position] = None,
) -> List[Block]:
    """Interleave sorted segments and comments into code and prose blocks.

    Args:
        segments: Output of partition_tokens (sorted, non-overlapping).
        comments: Comments sorted by start, non-overlapping.
        lines: The analyzed buffer, one string per line.
        buffer_end: End-of-buffer position; defaults to the end of ``lines``.

    Returns:
        Blocks in source order.
    """
    if buffer_end is None:
        buffer_end = end_of_buffer(lines)

    builder = _BlockBuilder()
    cursor = Position(0, 0)
    seg_idx = 0
    com_idx = 0

    while True:
        if cursor >= buffer_end and seg_idx >= len(segments) and com_idx >= len(comments):
            break

        next_seg = segments[seg_idx].span.start if seg_idx < len(segments) else None
        next_com = comments[com_idx].span.start if com_idx < len(comments) else None

        gap_end = buffer_end
        if next_seg is not None and next_seg < gap_end:
            gap_end = next_seg
        if next_com is not None and next_com < gap_end:
            gap_end = next_com

        if cursor < gap_end:
            text = extract_text(lines, Span(cursor, gap_end))
            if not builder.is_open:
                text = text.lstrip()
            if gap_end == next_com:
                text = text.rstrip()
            if text:
                builder.add_run(TextRun(text=text))
            cursor = gap_end

        if next_com is not None and cursor == next_com:
            comment = comments[com_idx]
            builder.add_prose(comment.content)
            cursor = comment.span.end
            com_idx += 1
            while seg_idx < len(segments) and segments[seg_idx].span.end <= cursor:
                seg_idx += 1
        elif next_seg is not None and cursor == next_seg:
            segment = segments[seg_idx]
            builder.add_run(AnnotatedRun(
                text=extract_text(lines, segment.span),
                segment=segment,
                kind=run_kind(segment.annotation),
            ))
            cursor = segment.span.end
            seg_idx += 1
        elif cursor >= buffer_end:
            break
        else:
            logger.warning(
                "Assembler stalled at %s (next segment %s, next comment %s); forcing advance",
                cursor, next_seg, next_com,
            )
            cursor = _advance_one(cursor, lines, buffer_end)

    builder.close()
    return builder.blocks


def assemble_document(
    segments: Sequence[Segment],
    comments: Sequence[Comment],
    lines: Sequence[str],
    source_filename: str = "",
) -> Document:
    """Assemble blocks and wrap them in a Document for the renderers."""
    blocks = assemble_blocks(segments, comments, lines)
    return Document(
        blocks=blocks,
        source_filename=source_filename,
        line_count=len(lines),
    )
