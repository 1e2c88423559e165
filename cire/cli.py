"""Command-line interface for cire.

WHY: Users need a single command that turns a source file into a
literate document. The CLI wires together analyzer selection, annotation
file loading, the concurrent analysis pipeline, renderer selection and
file saving.

HOW: Uses argparse to accept the source file, output format, annotation
files, analyzer selection, comment language and output options. Runs the
async pipeline via asyncio.run(). Status messages go to stderr; the
output file is saved next to the source unless --output is given.

RULES:
- Positional argument: source file path
- --format: one of the RENDERERS keys (default from CIRE_DEFAULT_FORMAT)
- --annotations: repeatable JSON annotation files, validated before analysis
- --analyzers: comma-separated ANALYZERS keys; default is all of them for
  Python sources, tree-sitter highlighting for other grammars, none otherwise
- Comment language comes from --lang or the source suffix; --no-comments
  disables prose extraction
- Output naming: [YYYY-MM-DD-]{basename}{suffix} next to the source,
  numeric suffix on conflict (main.py-2.mdx); --output writes exactly there
- Status output goes to stderr; errors exit with code 1
"""

from __future__ import annotations

import argparse
import asyncio
import datetime
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cire.analyzers import ANALYZERS, LANGUAGE_ANALYZERS
from cire.analyzers.annotations_file import AnnotationFileError, FileAnalyzer, load_annotations
from cire.analyzers.base import AnalyzerError, BaseAnalyzer
from cire.analyzers.comments import SUPPORTED_LANGUAGES, CommentAnalyzer
from cire.analyzers.syntax_tree import GRAMMARS
from cire.config import (
    DEFAULT_DATE_PREFIX,
    DEFAULT_FORMAT,
    LOG_LEVEL,
    SUPPORTED_SOURCE_SUFFIXES,
    language_for,
)
from cire.core.ir import Comment
from cire.core.partitioner import PartitionError
from cire.pipeline import build_document
from cire.renderers import RENDERERS
from cire.renderers.base import BaseRenderer, CodeRenderer, RendererOutput


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(
    source_path: Path,
    suffix: str,
    date_prefix: bool,
    today: Optional[datetime.date] = None,
) -> Path:
    """Resolve the output file path next to the source, avoiding overwrites.

    WHY: Re-running cire on the same file should not silently replace a
    document someone may have edited by hand.

    HOW: Build ``[date-]{basename}{suffix}``. If it exists, insert a
    counter before the suffix until a free name is found.

    RULES:
    - First attempt: main.py.mdx (or 2024-05-01-main.py.mdx with --date)
    - Conflict: main.py-2.mdx, main.py-3.mdx, ...
    """
    prefix = ""
    if date_prefix:
        prefix = (today or datetime.date.today()).isoformat() + "-"
    stem = "{}{}".format(prefix, source_path.name)
    directory = source_path.parent

    base_path = directory / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    counter = 2
    while True:
        candidate = directory / "{}-{}{}".format(stem, counter, suffix)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: RendererOutput, path: Path) -> Path:
    path.write_text(output.content, encoding="utf-8")
    return path


def _select_analyzers(args: argparse.Namespace, source_path: Path) -> List[BaseAnalyzer]:
    """Instantiate the requested registry analyzers.

    An explicit --analyzers list always wins. Otherwise every registered
    analyzer runs for Python sources, tree-sitter highlighting runs for
    other languages with a grammar, and nothing runs for the rest.
    """
    language = args.lang or language_for(source_path.suffix)
    is_python = source_path.suffix.lower() in SUPPORTED_SOURCE_SUFFIXES or (
        language is not None and language.lower() in ("python", "py")
    )

    if args.analyzers is not None:
        keys = [k.strip() for k in args.analyzers.split(",") if k.strip()]
        for key in keys:
            if key not in ANALYZERS:
                available = ", ".join(sorted(ANALYZERS.keys()))
                _fail("Unknown analyzer '{}'. Available analyzers: {}".format(key, available))
            if not is_python and key not in LANGUAGE_ANALYZERS:
                _fail("Analyzer '{}' only supports Python sources".format(key))
    elif is_python:
        keys = list(ANALYZERS.keys())
    elif language is not None and language.lower() in GRAMMARS:
        keys = list(LANGUAGE_ANALYZERS.keys())
    else:
        keys = []

    if is_python:
        return [ANALYZERS[key]() for key in keys]
    if keys and (language is None or language.lower() not in GRAMMARS):
        _fail("No grammar for '{}'; use --lang".format(source_path.suffix))
    return [LANGUAGE_ANALYZERS[key](language) for key in keys]


def _select_comment_analyzer(args: argparse.Namespace, source_path: Path) -> Optional[CommentAnalyzer]:
    if args.no_comments:
        return None
    language = args.lang or language_for(source_path.suffix)
    if language is None:
        _status("  No comment language for '{}'; prose extraction skipped".format(source_path.suffix))
        return None
    if language.lower() not in SUPPORTED_LANGUAGES:
        _fail("Unsupported language '{}'. Supported: {}".format(
            language, ", ".join(sorted(SUPPORTED_LANGUAGES))
        ))
    return CommentAnalyzer(language)


def _build_renderer(args: argparse.Namespace) -> BaseRenderer:
    renderer_cls = RENDERERS[args.format]
    if issubclass(renderer_cls, CodeRenderer):
        return renderer_cls(
            code_wrapper_start=args.code_wrapper_start,
            code_wrapper_end=args.code_wrapper_end,
        )
    return renderer_cls()


async def _run_pipeline(args: argparse.Namespace) -> None:
    """Execute the full documentation pipeline.

    HOW: Validates inputs, loads annotation files, runs analyzers through
    build_document(), renders, and saves the output file.
    """
    source_path = Path(args.source).resolve()
    if not source_path.is_file():
        _fail("File not found: {}".format(source_path))

    if args.format not in RENDERERS:
        available = ", ".join(sorted(RENDERERS.keys()))
        _fail("Unknown format '{}'. Available formats: {}".format(args.format, available))

    _status("Source: {}".format(source_path))
    source = source_path.read_text(encoding="utf-8")

    analyzers = _select_analyzers(args, source_path)
    extra_comments: List[Comment] = []
    for path in args.annotations or []:
        try:
            annotations = load_annotations(path)
        except (AnnotationFileError, OSError) as e:
            _fail(str(e))
        _status("  Annotations: {} ({} tokens, {} comments)".format(
            path, len(annotations.tokens), len(annotations.comments)
        ))
        analyzers.append(FileAnalyzer(annotations, label=str(path)))
        extra_comments.extend(annotations.comments)

    comment_analyzer = _select_comment_analyzer(args, source_path)

    _status("Analyzing with {} analyzer(s)...".format(len(analyzers)))
    try:
        document = await build_document(
            source,
            source_path.name,
            analyzers,
            comment_analyzer=comment_analyzer,
            extra_comments=extra_comments,
        )
    except (AnalyzerError, PartitionError) as e:
        _fail("analysis failed: {}".format(e))

    _status("  {} code block(s), {} prose block(s)".format(
        len(document.code_blocks), len(document.prose_blocks)
    ))

    renderer = _build_renderer(args)
    _status("Rendering {}...".format(renderer.name))
    for output in renderer.render(document):
        if args.output:
            path = Path(args.output)
        else:
            path = _resolve_output_path(source_path, output.suffix, args.date)
        _save_output(output, path)
        _status("{} generated at: {}".format(renderer.name, path))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable: tests can inspect the parser without running the pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="cire",
        description="Turn a source file into a literate document: comments become "
                    "prose, code becomes highlighted and cross-linked listings.",
    )

    parser.add_argument(
        "source",
        help="Path to the source file to document.",
    )

    parser.add_argument(
        "--format",
        default=DEFAULT_FORMAT,
        help="Output format. Available: {} (default: %(default)s).".format(
            ", ".join(sorted(RENDERERS.keys()))
        ),
    )

    parser.add_argument(
        "--annotations",
        action="append",
        default=None,
        help="Path to a JSON annotation file from an external indexer. "
             "Can be specified multiple times.",
    )

    parser.add_argument(
        "--analyzers",
        default=None,
        help="Comma-separated built-in analyzers. Available: {}. "
             "Default: all for Python sources, none otherwise.".format(
                 ", ".join(sorted(ANALYZERS.keys()))
             ),
    )

    parser.add_argument(
        "--lang",
        default=None,
        help="Language for comment extraction (default: from the file suffix).",
    )

    parser.add_argument(
        "--no-comments",
        action="store_true",
        help="Do not turn comments into prose.",
    )

    parser.add_argument(
        "--output",
        default=None,
        help="Output file path (default: next to the source file).",
    )

    parser.add_argument(
        "--date",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_DATE_PREFIX,
        help="Prefix the output filename with the current date (default: %(default)s).",
    )

    parser.add_argument(
        "--code-wrapper-start",
        default=None,
        help="Custom opening markup for code blocks.",
    )

    parser.add_argument(
        "--code-wrapper-end",
        default=None,
        help="Custom closing markup for code blocks.",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output to stderr.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else LOG_LEVEL,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    asyncio.run(_run_pipeline(args))


if __name__ == "__main__":
    main()
