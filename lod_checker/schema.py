"""
Response contract for the analysis service.

REPORT_JSON_SCHEMA is the local, strict JSON Schema (Draft 2020-12) every reply
is validated against. response_schema() builds the equivalent declaration that
is sent to Gemini so the model answers in the same shape.
"""

import json
import math
from copy import deepcopy
from typing import Any, Dict

from google.genai import types
from jsonschema import Draft202012Validator, ValidationError

from lod_checker.errors import SchemaViolationError
from lod_checker.models import FACETS, AnalysisResult, ComplianceStatus

STATUS_VALUES = [status.value for status in ComplianceStatus]

_SCORE = {"type": "number", "minimum": 0, "maximum": 100}
_STRING_LIST = {"type": "array", "items": {"type": "string"}}

SECTION_JSON_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "score": _SCORE,
        "status": {"type": "string", "enum": STATUS_VALUES},
        "observations": _STRING_LIST,
        "missing": _STRING_LIST,
        "recommendations": _STRING_LIST,
    },
    "required": ["score", "status", "observations", "missing", "recommendations"],
}

REPORT_JSON_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "properties": {
        "overallScore": _SCORE,
        "lodTarget": {"type": "string"},
        "elementName": {"type": "string"},
        "summary": {"type": "string"},
        "geometry": {"$ref": "#/$defs/section"},
        "parameters": {"$ref": "#/$defs/section"},
        "information": {"$ref": "#/$defs/section"},
    },
    "required": [
        "overallScore", "lodTarget", "elementName", "summary",
        "geometry", "parameters", "information",
    ],
    "$defs": {"section": SECTION_JSON_SCHEMA},
}

_VALIDATOR = Draft202012Validator(REPORT_JSON_SCHEMA)


def _section_schema() -> types.Schema:
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "score": types.Schema(type=types.Type.NUMBER),
            "status": types.Schema(type=types.Type.STRING, enum=list(STATUS_VALUES)),
            "observations": types.Schema(type=types.Type.ARRAY, items=types.Schema(type=types.Type.STRING)),
            "missing": types.Schema(type=types.Type.ARRAY, items=types.Schema(type=types.Type.STRING)),
            "recommendations": types.Schema(type=types.Type.ARRAY, items=types.Schema(type=types.Type.STRING)),
        },
        required=list(SECTION_JSON_SCHEMA["required"]),
    )


def response_schema() -> types.Schema:
    """Schema declared on the Gemini request (the service's structured-output form)."""
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "overallScore": types.Schema(type=types.Type.NUMBER, description="0 to 100 compliance score"),
            "lodTarget": types.Schema(type=types.Type.STRING),
            "elementName": types.Schema(type=types.Type.STRING, description="Identified element name"),
            "summary": types.Schema(
                type=types.Type.STRING,
                description="Executive summary of the check in English (with Arabic translation in parentheses if useful)",
            ),
            "geometry": _section_schema(),
            "parameters": _section_schema(),
            "information": _section_schema(),
        },
        required=list(REPORT_JSON_SCHEMA["required"]),
    )


def validate_report(data: Any) -> Dict[str, Any]:
    """Raise SchemaViolationError unless data matches REPORT_JSON_SCHEMA. Returns a copy."""
    try:
        _VALIDATOR.validate(data)
    except ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise SchemaViolationError(f"invalid report at {where}: {e.message}") from e
    # minimum/maximum comparisons are all false for NaN, so check finiteness here
    scores = [("overallScore", data["overallScore"])]
    scores += [(f"{facet}/score", data[facet]["score"]) for facet in FACETS]
    for where, score in scores:
        if not math.isfinite(score):
            raise SchemaViolationError(f"invalid report at {where}: {score!r} is not a finite number")
    return deepcopy(data)


def _reject_constant(token: str):
    raise SchemaViolationError(f"response contains non-finite number {token}")


def parse_report(text: str) -> AnalysisResult:
    """Parse raw service text into an AnalysisResult; never returns a partial result."""
    if not text or not text.strip():
        raise SchemaViolationError("empty response text")
    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise SchemaViolationError(f"response is not JSON: {e}") from e
    return AnalysisResult.from_dict(validate_report(data))
