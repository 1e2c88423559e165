"""Configuration constants, output defaults, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Code-block wrappers, the default output format and
log level are plain data, not buried in renderer logic, so a project
can restyle its generated docs without touching code.

HOW: python-dotenv loads the .env file on import. Constants are defined
at module level and read from environment variables with defaults.
wrappers_for() returns the wrapper pair a renderer should use.

RULES:
- CIRE_DEFAULT_FORMAT picks the renderer when --format is not given
- CIRE_CODE_WRAPPER_START / CIRE_CODE_WRAPPER_END override the wrappers
  of every renderer that uses them
- CIRE_DATE_PREFIX=true prefixes output filenames with the current date
- CIRE_LOG_LEVEL sets the logging level of the CLI (default WARNING)
- Built-in analyzers only run on SUPPORTED_SOURCE_SUFFIXES
"""

from __future__ import annotations

import os
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

# Load .env from the working directory
load_dotenv()

# ---------------------------------------------------------------------------
# Output defaults
# ---------------------------------------------------------------------------

DEFAULT_FORMAT = os.getenv("CIRE_DEFAULT_FORMAT", "mdx")
DEFAULT_DATE_PREFIX = os.getenv("CIRE_DATE_PREFIX", "false").lower() == "true"
LOG_LEVEL = os.getenv("CIRE_LOG_LEVEL", "WARNING").upper()

CODE_WRAPPER_START_OVERRIDE: Optional[str] = os.getenv("CIRE_CODE_WRAPPER_START")
CODE_WRAPPER_END_OVERRIDE: Optional[str] = os.getenv("CIRE_CODE_WRAPPER_END")

# Per-format (start, end) wrappers around every code block.
DEFAULT_WRAPPERS: Dict[str, Tuple[str, str]] = {
    "markdown": ('<pre><code class="cire">', "</code></pre>"),
    "mdx": (
        '<details open="true">\n<summary>Expand to view code</summary>\n<pre className="cire"><code>',
        "</code></pre>\n</details>",
    ),
}

# ---------------------------------------------------------------------------
# Source languages
# ---------------------------------------------------------------------------

SUPPORTED_SOURCE_SUFFIXES = {".py", ".pyi"}
"""File suffixes the built-in (Python) analyzers understand."""

LANGUAGE_BY_SUFFIX: Dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".rb": "ruby",
    ".go": "go",
    ".rs": "rust",
    ".c": "c",
    ".h": "c",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".java": "java",
    ".js": "javascript",
    ".ts": "typescript",
    ".cs": "csharp",
    ".php": "php",
    ".dart": "dart",
    ".hs": "haskell",
}


def language_for(path_suffix: str) -> Optional[str]:
    """Map a file suffix (with dot) to a comment language, or None."""
    return LANGUAGE_BY_SUFFIX.get(path_suffix.lower())


def wrappers_for(fmt: str) -> Tuple[str, str]:
    """Return the (start, end) code-block wrappers for a format.

    Environment overrides win over the built-in defaults; formats without
    defaults get empty wrappers.
    """
    start, end = DEFAULT_WRAPPERS.get(fmt, ("", ""))
    if CODE_WRAPPER_START_OVERRIDE is not None:
        start = CODE_WRAPPER_START_OVERRIDE
    if CODE_WRAPPER_END_OVERRIDE is not None:
        end = CODE_WRAPPER_END_OVERRIDE
    return start, end
