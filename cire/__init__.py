"""cire: literate views of source files.

WHY: Reading code together with its comments as flowing prose, with
highlighted and cross-linked code in between, is easier than reading a
raw listing. Highlighting, symbol indexes and hover documentation come
from different tools whose annotations overlap; something has to merge
them into one consistent document.

HOW: Three-stage pipeline: analyze (pluggable analyzers produce tokens
and comments), assemble (core partitions tokens and interleaves prose),
render (pluggable renderers escape and format). Each stage is
independently testable.

RULES:
- All renderers consume the same Document IR
- Adding an analyzer or renderer = one new module plus one registry line
- The core never does I/O and never escapes output syntax
"""

__version__ = "0.1.0"
