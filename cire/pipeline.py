"""Analysis → partition → assembly pipeline for one source file.

WHY: Analyzers are independent and some are slow (large annotation
files, full-file parses), so they should run concurrently. The core, on
the other hand, needs the complete, final token list before it can
guarantee coverage and non-overlap. The pipeline is the seam between the
two.

HOW: build_document() runs every analyzer and the comment analyzer in
worker threads via asyncio.to_thread and waits for all of them with
asyncio.gather. The first failure propagates and nothing is partitioned.
Results are concatenated, sorted, partitioned and assembled into a
Document.

RULES:
- The source text is shared read-only by all analyzers
- Partial results are never partitioned
- Extra comments (e.g. from annotation files) are merged with extracted
  comments; a comment overlapping an earlier one is dropped with a warning
- build_document_sync() is the entry point for non-async callers
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from cire.analyzers.base import BaseAnalyzer
from cire.analyzers.comments import CommentAnalyzer
from cire.core.assembler import assemble_document
from cire.core.ir import Comment, Document, Token
from cire.core.partitioner import partition_tokens
from cire.core.positions import sort_comments, sort_tokens, split_lines

logger = logging.getLogger(__name__)


def merge_comments(comments: Sequence[Comment]) -> List[Comment]:
    """Sort comments and drop any that overlap an earlier kept comment."""
    merged: List[Comment] = []
    for comment in sort_comments(comments):
        if merged and comment.span.start < merged[-1].span.end:
            logger.warning(
                "Dropping comment at %s: overlaps comment ending at %s",
                comment.span, merged[-1].span.end,
            )
            continue
        merged.append(comment)
    return merged


async def _run_analyzer(analyzer: BaseAnalyzer, source: str) -> List[Token]:
    tokens = await asyncio.to_thread(analyzer.analyze, source)
    logger.debug("%s produced %d tokens", analyzer.name, len(tokens))
    return tokens


async def _run_comments(analyzer: Optional[CommentAnalyzer], source: str) -> List[Comment]:
    if analyzer is None:
        return []
    comments = await asyncio.to_thread(analyzer.analyze, source)
    logger.debug("%s produced %d comments", analyzer.name, len(comments))
    return comments


async def build_document(
    source: str,
    source_filename: str,
    analyzers: Sequence[BaseAnalyzer],
    comment_analyzer: Optional[CommentAnalyzer] = None,
    extra_comments: Sequence[Comment] = (),
) -> Document:
    """Run all analyzers concurrently, then partition and assemble.

    Args:
        source: Full text of the file.
        source_filename: Basename recorded on the Document.
        analyzers: Token producers; run concurrently.
        comment_analyzer: Prose extractor, or None to skip prose.
        extra_comments: Comments supplied by other producers.

    Returns:
        The assembled Document.

    Raises:
        AnalyzerError: If any analyzer fails.
        PartitionError: If the sweep hits an invariant violation.
    """
    results = await asyncio.gather(
        _run_comments(comment_analyzer, source),
        *(_run_analyzer(a, source) for a in analyzers),
    )
    comments: List[Comment] = list(results[0]) + list(extra_comments)
    all_tokens: List[Token] = []
    for tokens in results[1:]:
        all_tokens.extend(tokens)

    segments = partition_tokens(sort_tokens(all_tokens))
    logger.debug("Partitioned %d tokens into %d segments", len(all_tokens), len(segments))

    return assemble_document(
        segments,
        merge_comments(comments),
        split_lines(source),
        source_filename=source_filename,
    )


def build_document_sync(
    source: str,
    source_filename: str,
    analyzers: Sequence[BaseAnalyzer],
    comment_analyzer: Optional[CommentAnalyzer] = None,
    extra_comments: Sequence[Comment] = (),
) -> Document:
    return asyncio.run(build_document(
        source,
        source_filename,
        analyzers,
        comment_analyzer=comment_analyzer,
        extra_comments=extra_comments,
    ))
