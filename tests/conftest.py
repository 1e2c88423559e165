"""Shared test fixtures for the cire test suite.

WHY: Several test modules need the same small source buffers and the
same annotation-file payload. Centralizing them here avoids duplication
and keeps the expected coordinates in one place.

HOW: Pytest fixtures provide a short Python module (with standalone and
trailing comments, a documented function and a reference to it), its
line buffer, and a JSON annotation document in both span encodings.

RULES:
- Coordinates in expectations are 0-based lines and code-point columns
- Fixtures return fresh objects; tests may mutate what they receive
"""

from typing import Any, Dict, List

import pytest

from cire.core.positions import split_lines


SAMPLE_SOURCE = '''\
# Greeting helpers
# used by the demo.
import os


def greet(name):
    """Say hello."""
    return "hi " + name  # friendly


# Entry point
print(greet(os.name))
'''


@pytest.fixture
def sample_source() -> str:
    """A small Python module with prose comments, a def and a use."""
    return SAMPLE_SOURCE


@pytest.fixture
def sample_lines() -> List[str]:
    return split_lines(SAMPLE_SOURCE)


@pytest.fixture
def annotation_payload() -> Dict[str, Any]:
    """An external annotation document using both span encodings."""
    return {
        "tokens": [
            {
                "span": {"start": {"line": 5, "column": 4}, "end": {"line": 5, "column": 9}},
                "symbol": "greet",
                "is_definition": True,
                "doc_text": ["def greet(name)"],
            },
            {
                "range": [11, 6, 11],
                "symbol": "greet",
                "is_reference": True,
            },
            {
                "range": [6, 4, 6, 20],
                "highlight_class": "string",
            },
        ],
        "comments": [
            {"range": [0, 0, 1, 19], "content": "Greeting helpers\nused by the demo."},
        ],
    }
