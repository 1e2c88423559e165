"""Abstract base analyzer and shared analyzer errors.

WHY: Highlighting, symbol indexing and annotation-file loading all produce
the same thing (a list of Tokens in the buffer's coordinates) but from
very different sources. A common interface lets the pipeline run any
combination of them concurrently without knowing their internals.

HOW: BaseAnalyzer is an ABC with a ``name`` property and an ``analyze()``
method taking the full source text. Analyzers are instantiated per run
and must not keep state between calls.

RULES:
- Coordinates are 0-based lines and 0-based code-point columns of the
  exact text passed to analyze()
- Tokens may overlap each other freely; the core partitions them
- Unrecoverable failures raise AnalyzerError; recoverable degradation
  is logged and yields fewer tokens
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from cire.core.ir import Token


class AnalyzerError(Exception):
    """Raised when an analyzer cannot produce tokens for a source.

    WHY: The pipeline must not partition partial input; a typed error lets
    the CLI report which analyzer failed and why.

    RULES:
    - Message names the analyzer and the underlying cause
    """


class BaseAnalyzer(ABC):
    """Abstract base for all token analyzers.

    To add a new analyzer:
    1. Create a new file in analyzers/
    2. Subclass BaseAnalyzer
    3. Implement analyze() and name
    4. Register in ANALYZERS dict in analyzers/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable analyzer name, e.g. 'Python highlighting'."""

    @abstractmethod
    def analyze(self, source: str) -> List[Token]:
        """Produce tokens for ``source``.

        Args:
            source: Complete text of the file being documented.

        Returns:
            Tokens in any order; callers sort them.
        """
