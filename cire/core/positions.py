"""Position ordering and literal text extraction over a line buffer.

WHY: Every stage compares positions and slices source text. Analyzers
report columns in code points, so slicing must index characters, not
bytes, and must tolerate spans that point past the buffer.

HOW: compare() and the sort helpers define the single ordering the
partitioner and assembler rely on. extract_text() slices a span out of
the buffer, clamping out-of-range coordinates instead of failing.

RULES:
- Token order: start ascending, then end ascending
- Comment order: start ascending
- Sort helpers return new lists and never mutate their input
- Malformed spans yield "" rather than raising
- The buffer is split on "\\n" only; lines carry no terminators
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from cire.core.ir import Comment, Position, Span, Token


def compare(a: Position, b: Position) -> int:
    """Return -1, 0 or 1 as ``a`` sorts before, equal to, or after ``b``."""
    if (a.line, a.column) < (b.line, b.column):
        return -1
    if (a.line, a.column) > (b.line, b.column):
        return 1
    return 0


def token_sort_key(token: Token) -> Tuple[Position, Position]:
    return (token.span.start, token.span.end)


def sort_tokens(tokens: Iterable[Token]) -> List[Token]:
    """Sort tokens by start, then by end (shorter first on equal starts)."""
    return sorted(tokens, key=token_sort_key)


def sort_comments(comments: Iterable[Comment]) -> List[Comment]:
    return sorted(comments, key=lambda c: c.span.start)


def split_lines(text: str) -> List[str]:
    """Split source text into lines without terminators.

    A trailing newline yields a final empty line, so the end-of-buffer
    position sits after the last newline.
    """
    return text.split("\n")


def end_of_buffer(lines: Sequence[str]) -> Position:
    if not lines:
        return Position(0, 0)
    return Position(len(lines) - 1, len(lines[-1]))


def extract_text(lines: Sequence[str], span: Span) -> str:
    """Return the literal source text covered by ``span``.

    WHY: The assembler needs the exact characters of gaps and segments;
    producers may hand in spans that run past line or buffer bounds.

    HOW: Python strings index code points, so plain slicing gives rune
    semantics. Lines past the buffer end are clamped to the last line.
    Single-line ranges clamp both columns to the line; multi-line ranges
    take the first line's tail, the full middle lines, and the last
    line's head, joined with newlines.

    RULES:
    - start line out of range → ""
    - inverted or zero-length single-line range → ""
    - out-of-range start column → 0 (single line), end column → line length
    """
    start_line = span.start.line
    end_line = span.end.line

    if start_line < 0 or end_line < 0 or start_line >= len(lines):
        return ""
    if end_line >= len(lines):
        end_line = len(lines) - 1

    if start_line == end_line:
        line = lines[start_line]
        start_col = span.start.column
        end_col = span.end.column
        if start_col < 0 or start_col > len(line):
            start_col = 0
        if end_col < 0 or end_col > len(line):
            end_col = len(line)
        if end_col <= start_col:
            return ""
        return line[start_col:end_col]

    if end_line < start_line:
        return ""

    parts: List[str] = []
    first = lines[start_line]
    start_col = max(span.start.column, 0)
    parts.append(first[start_col:] if start_col <= len(first) else "")
    parts.extend(lines[start_line + 1:end_line])
    last = lines[end_line]
    end_col = min(max(span.end.column, 0), len(last))
    parts.append(last[:end_col])
    return "\n".join(parts)


def char_column(line: str, byte_offset: int) -> int:
    """Convert a UTF-8 byte offset within ``line`` to a code-point column."""
    return len(line.encode("utf-8")[:byte_offset].decode("utf-8", errors="ignore"))
