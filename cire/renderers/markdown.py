"""Markdown renderer with HTML code listings.

WHY: Plain Markdown sites (GitHub pages, MkDocs) render raw HTML inside
Markdown, so an HTML ``<pre><code>`` listing with anchors and links gives
navigable, highlighted code without a JavaScript toolchain.

HOW: Prose blocks are emitted verbatim as Markdown. Code blocks are
wrapped in the configured wrappers and every run is HTML-escaped;
annotated runs become anchors (definitions), links (references) or
classed spans (highlights).

RULES:
- Escape & < > " ' in all source text, symbols and hover docs
- Definition → <span id="SYM" class="CLS">, reference → <a href="#SYM" class="CLS">
- Highlight → <span class="CLS">, plain → escaped text
- Hover → <span class="cire_hover">RUN<span class="cire_doc">DOC</span></span>,
  doc fragments joined by a blank line
- Output suffix: ".md"
"""

from __future__ import annotations

from cire.core.ir import AnnotatedRun, RunKind, TextRun
from cire.renderers.base import CodeRenderer


def escape_html(text: str) -> str:
    if not text:
        return ""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


class MarkdownRenderer(CodeRenderer):
    """Markdown prose with HTML-escaped, cross-linked code listings."""

    format_key = "markdown"
    suffix = ".md"
    media_type = "text/markdown"

    @property
    def name(self) -> str:
        return "Markdown"

    def render_text(self, run: TextRun) -> str:
        return escape_html(run.text)

    def render_annotated(self, run: AnnotatedRun) -> str:
        content = escape_html(run.text)
        ann = run.annotation
        css = escape_html(ann.highlight_class)

        if run.kind is RunKind.DEFINITION:
            return '<span id="{}" class="{}">{}</span>'.format(escape_html(ann.symbol), css, content)
        if run.kind is RunKind.REFERENCE:
            return '<a href="#{}" class="{}">{}</a>'.format(escape_html(ann.symbol), css, content)
        if run.kind is RunKind.HIGHLIGHT:
            return '<span class="{}">{}</span>'.format(css, content)
        return content

    def render_hover(self, inner: str, run: AnnotatedRun) -> str:
        doc = escape_html("\n\n".join(run.doc_text))
        return '<span class="cire_hover">{}<span class="cire_doc">{}</span></span>'.format(inner, doc)
