"""MDX renderer for React-based documentation sites.

WHY: Docusaurus-style sites compile MDX, where raw ``{``, ``}`` and
``<`` in code would be parsed as JSX. Wrapping every piece of source text
in a template literal keeps it inert while still allowing anchors,
links and classed spans around it.

HOW: Each run becomes ``{`...`}`` inside a JSX element. Template-literal
content escapes backslashes, backticks and ``${`` on top of the HTML
entities; attribute values get JSX attribute escaping. Prose blocks are
emitted verbatim so comments can contain MDX themselves.

RULES:
- Attributes use className, not class
- Literal text runs and plain segments use <span className="cire_text">
- Tabs and carriage returns are written as \\t and \\r escapes
- Hover → <span className="cire_hover">RUN<span className="cire_doc">{`DOC`}</span></span>
- Output suffix: ".mdx"
"""

from __future__ import annotations

from cire.core.ir import AnnotatedRun, RunKind, TextRun
from cire.renderers.base import CodeRenderer


def escape_template_literal(text: str) -> str:
    """Escape text for the inside of a JSX template literal."""
    if not text:
        return ""
    result = text
    result = result.replace("&", "&amp;")
    result = result.replace("<", "&lt;")
    result = result.replace(">", "&gt;")
    result = result.replace("\\", "\\\\")
    result = result.replace("`", "\\`")
    result = result.replace("${", "\\${")
    result = result.replace("\t", "\\t")
    result = result.replace("\r", "\\r")
    return result


def escape_attribute(text: str) -> str:
    """Escape text for a double-quoted JSX attribute value."""
    if not text:
        return ""
    result = text
    result = result.replace("&", "&amp;")
    result = result.replace("<", "&lt;")
    result = result.replace(">", "&gt;")
    result = result.replace('"', "&quot;")
    result = result.replace("'", "&#39;")
    result = result.replace("\t", "\\t")
    result = result.replace("{", "\\{")
    result = result.replace("}", "\\}")
    return result


def _literal(text: str) -> str:
    return "{`" + escape_template_literal(text) + "`}"


class MdxRenderer(CodeRenderer):
    """MDX prose with JSX-safe, cross-linked code listings."""

    format_key = "mdx"
    suffix = ".mdx"
    media_type = "text/mdx"

    @property
    def name(self) -> str:
        return "MDX"

    def render_text(self, run: TextRun) -> str:
        return '<span className="cire_text">{}</span>'.format(_literal(run.text))

    def render_annotated(self, run: AnnotatedRun) -> str:
        content = _literal(run.text)
        ann = run.annotation
        css = escape_attribute(ann.highlight_class)

        if run.kind is RunKind.DEFINITION:
            return '<span id="{}" className="{}">{}</span>'.format(escape_attribute(ann.symbol), css, content)
        if run.kind is RunKind.REFERENCE:
            return '<a href="#{}" className="{}">{}</a>'.format(escape_attribute(ann.symbol), css, content)
        if run.kind is RunKind.HIGHLIGHT:
            return '<span className="{}">{}</span>'.format(css, content)
        return '<span className="cire_text">{}</span>'.format(content)

    def render_hover(self, inner: str, run: AnnotatedRun) -> str:
        doc = _literal("\n\n".join(run.doc_text))
        return '<span className="cire_hover">{}<span className="cire_doc">{}</span></span>'.format(inner, doc)
