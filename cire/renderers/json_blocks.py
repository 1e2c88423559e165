"""Structured JSON renderer for custom front ends.

WHY: Some sites want to build their own components (tooltips, symbol
sidebars) instead of consuming pre-baked HTML. A JSON dump of the block
sequence gives them the assembled document with all structural metadata
and no escaping decisions made for them.

HOW: Each block and run is converted to a plain dict; the result is
validated with jsonschema against BLOCKS_SCHEMA before serialization.

RULES:
- Run text is written verbatim (JSON encoding is the only escaping)
- Annotated runs carry kind, symbol, highlight_class, doc_text and span
- Validate output against the schema before returning; raise on failure
- Output suffix: ".json"
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

import jsonschema

from cire.core.ir import AnnotatedRun, CodeBlock, Document, Position, Run, Span
from cire.renderers.base import BaseRenderer, RendererOutput

_POSITION = {
    "type": "object",
    "required": ["line", "column"],
    "properties": {
        "line": {"type": "integer", "minimum": 0},
        "column": {"type": "integer", "minimum": 0},
    },
    "additionalProperties": False,
}

BLOCKS_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["source", "line_count", "blocks"],
    "properties": {
        "source": {"type": "string"},
        "line_count": {"type": "integer", "minimum": 0},
        "blocks": {
            "type": "array",
            "items": {
                "oneOf": [
                    {
                        "type": "object",
                        "required": ["type", "runs"],
                        "properties": {
                            "type": {"const": "code"},
                            "runs": {
                                "type": "array",
                                "minItems": 1,
                                "items": {"$ref": "#/definitions/run"},
                            },
                        },
                        "additionalProperties": False,
                    },
                    {
                        "type": "object",
                        "required": ["type", "content"],
                        "properties": {
                            "type": {"const": "prose"},
                            "content": {"type": "string"},
                        },
                        "additionalProperties": False,
                    },
                ]
            },
        },
    },
    "definitions": {
        "run": {
            "type": "object",
            "required": ["type", "text"],
            "properties": {
                "type": {"enum": ["text", "annotated"]},
                "text": {"type": "string"},
                "kind": {"enum": ["definition", "reference", "highlight", "plain"]},
                "symbol": {"type": "string"},
                "highlight_class": {"type": "string"},
                "doc_text": {"type": "array", "items": {"type": "string"}},
                "span": {
                    "type": "object",
                    "required": ["start", "end"],
                    "properties": {"start": _POSITION, "end": _POSITION},
                },
            },
        },
    },
}


def _position(pos: Position) -> Dict[str, int]:
    return {"line": pos.line, "column": pos.column}


def _span(span: Span) -> Dict[str, Any]:
    return {"start": _position(span.start), "end": _position(span.end)}


def _run_to_dict(run: Run) -> Dict[str, Any]:
    if not isinstance(run, AnnotatedRun):
        return {"type": "text", "text": run.text}
    ann = run.annotation
    return {
        "type": "annotated",
        "text": run.text,
        "kind": run.kind.value,
        "symbol": ann.symbol,
        "highlight_class": ann.highlight_class,
        "doc_text": list(ann.doc_text),
        "span": _span(run.segment.span),
    }


def document_to_dict(document: Document) -> Dict[str, Any]:
    blocks: List[Dict[str, Any]] = []
    for block in document.blocks:
        if isinstance(block, CodeBlock):
            blocks.append({"type": "code", "runs": [_run_to_dict(r) for r in block.runs]})
        else:
            blocks.append({"type": "prose", "content": block.content})
    return {
        "source": document.source_filename,
        "line_count": document.line_count,
        "blocks": blocks,
    }


class JsonRenderer(BaseRenderer):
    """Schema-validated JSON dump of the assembled document."""

    @property
    def name(self) -> str:
        return "JSON"

    def render(self, document: Document) -> List[RendererOutput]:
        """Convert the Document IR into block JSON.

        Raises:
            jsonschema.ValidationError: If the generated JSON does not
                conform to BLOCKS_SCHEMA.
        """
        output = document_to_dict(document)
        jsonschema.validate(instance=output, schema=BLOCKS_SCHEMA)
        return [
            RendererOutput(
                suffix=".json",
                content=json.dumps(output, indent=2, ensure_ascii=False) + "\n",
                media_type="application/json",
            )
        ]
