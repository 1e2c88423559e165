"""Token analyzer registry: pluggable annotation producers.

WHY: The CLI and the pipeline need a single lookup to find analyzers by
name. A central dict makes adding a new producer one import plus one line.

HOW: ANALYZERS maps string keys to analyzer *classes* (not instances) for
Python sources. Callers instantiate as needed:
``analyzer = ANALYZERS["highlight"]()``. LANGUAGE_ANALYZERS holds the
analyzers that work for any tree-sitter language and take the language
name: ``LANGUAGE_ANALYZERS["highlight"]("go")``. Annotation files and
comment extraction are configured per run and are constructed directly
rather than through the registry.

RULES:
- Keys are snake_case identifiers (used in CLI flags)
- ANALYZERS values have no-argument constructors
- LANGUAGE_ANALYZERS values take the language name
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Type

from cire.analyzers.highlight import HighlightAnalyzer, TreeSitterHighlightAnalyzer
from cire.analyzers.symbols import SymbolAnalyzer

if TYPE_CHECKING:
    from cire.analyzers.base import BaseAnalyzer

ANALYZERS: Dict[str, Type[BaseAnalyzer]] = {
    "highlight": HighlightAnalyzer,
    "symbols": SymbolAnalyzer,
}

LANGUAGE_ANALYZERS: Dict[str, Type[BaseAnalyzer]] = {
    "highlight": TreeSitterHighlightAnalyzer,
}
