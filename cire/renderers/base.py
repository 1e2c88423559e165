"""Abstract base renderer and output container.

WHY: Every output syntax consumes the same Document IR but produces
different file content. This base class enforces a consistent interface
so the CLI and the pipeline can work with any renderer generically.

HOW: BaseRenderer is an ABC with two requirements: a ``name`` property
and a ``render()`` method. RendererOutput is a plain dataclass that
bundles a file suffix with its content and MIME type. CodeRenderer adds
the shared walk over blocks and runs for the HTML-like syntaxes.

RULES:
- Subclasses MUST implement ``name`` and ``render()``
- ``suffix`` includes the dot, e.g. ``".mdx"``
- All escaping happens in renderers; run text arrives verbatim
- The caller is responsible for choosing the output directory and stem
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from cire.config import wrappers_for
from cire.core.ir import AnnotatedRun, CodeBlock, Document, ProseBlock, Run, TextRun


@dataclass
class RendererOutput:
    """One output file produced by a renderer.

    Attributes:
        suffix: File suffix appended to the output stem, e.g. ``".mdx"``.
        content: The rendered file content.
        media_type: MIME type for the content, e.g. ``"text/markdown"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseRenderer(ABC):
    """Abstract base for all document renderers.

    To add a new output syntax:
    1. Create a new file in renderers/
    2. Subclass BaseRenderer (or CodeRenderer for HTML-like output)
    3. Implement render() and name
    4. Register in RENDERERS dict in renderers/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable syntax name, e.g. 'MDX'."""

    @abstractmethod
    def render(self, document: Document) -> List[RendererOutput]:
        """Convert the Document IR into one or more output files."""


class CodeRenderer(BaseRenderer):
    """Shared block walk for renderers that wrap code blocks in markup.

    Subclasses provide the escaping and the per-run markup; this class
    decides where wrappers open and close and where prose goes.
    """

    format_key = ""
    suffix = ""
    media_type = "text/plain"

    def __init__(
        self,
        code_wrapper_start: Optional[str] = None,
        code_wrapper_end: Optional[str] = None,
    ) -> None:
        default_start, default_end = wrappers_for(self.format_key)
        self.code_wrapper_start = default_start if code_wrapper_start is None else code_wrapper_start
        self.code_wrapper_end = default_end if code_wrapper_end is None else code_wrapper_end

    @abstractmethod
    def render_text(self, run: TextRun) -> str:
        """Markup for literal source text."""

    @abstractmethod
    def render_annotated(self, run: AnnotatedRun) -> str:
        """Markup for a decorated run, without the hover decoration."""

    @abstractmethod
    def render_hover(self, inner: str, run: AnnotatedRun) -> str:
        """Wrap already-rendered run markup in a documentation hover."""

    def render_run(self, run: Run) -> str:
        if isinstance(run, TextRun):
            return self.render_text(run)
        inner = self.render_annotated(run)
        if run.doc_text:
            return self.render_hover(inner, run)
        return inner

    def render_code_block(self, block: CodeBlock) -> str:
        body = "".join(self.render_run(run) for run in block.runs)
        return "{}\n{}{}\n".format(self.code_wrapper_start, body, self.code_wrapper_end)

    def render_prose(self, block: ProseBlock) -> str:
        return block.content + "\n"

    def render(self, document: Document) -> List[RendererOutput]:
        parts: List[str] = []
        for block in document.blocks:
            if isinstance(block, CodeBlock):
                parts.append(self.render_code_block(block))
            else:
                parts.append(self.render_prose(block))
        return [
            RendererOutput(
                suffix=self.suffix,
                content="".join(parts),
                media_type=self.media_type,
            )
        ]
