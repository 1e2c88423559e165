"""Output renderer registry: pluggable output syntaxes.

WHY: The CLI needs a single lookup to find the right renderer by name.
A central dict makes it trivial to add new syntaxes: create the renderer
class, import it here, add one line.

HOW: RENDERERS maps string keys to renderer *classes* (not instances).
Callers instantiate as needed: ``renderer = RENDERERS["mdx"]()``.

RULES:
- Keys are the values accepted by --format
- Values are BaseRenderer subclasses (not instances)
- Every renderer listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Type

from cire.renderers.json_blocks import JsonRenderer
from cire.renderers.markdown import MarkdownRenderer
from cire.renderers.mdx import MdxRenderer

if TYPE_CHECKING:
    from cire.renderers.base import BaseRenderer

RENDERERS: Dict[str, Type[BaseRenderer]] = {
    "markdown": MarkdownRenderer,
    "mdx": MdxRenderer,
    "json": JsonRenderer,
}
