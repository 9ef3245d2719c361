"""Result file validation.

Checks a candidate result file in stages: well-formedness, the canonical
filename, required fields, the schema rules of the declared version, and
agreement between the filename and the run identity inside the document.
Every violation is collected; nothing is fixed silently.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import jmespath
from pydantic import ValidationError

from reportforge.documents.filename import (
    COMPACT_TIMESTAMP_PATTERN,
    FILENAME_EXAMPLE,
    FILENAME_PATTERN,
    FILENAME_TEMPLATE,
    parse_filename,
    tool_slug,
)
from reportforge.models.document import DOCUMENT_MODELS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Violation:
    """A single failed validation rule.

    Attributes:
        field: Dotted path of the offending field, or a filename component
            such as "filename.model".
        rule: Rule category (see RULE_CODES).
        message: Human-readable description.
    """

    field: str
    rule: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message} ({self.rule})"


RULE_CODES: dict[str, str] = {
    "well_formed": "V001",
    "pattern": "V002",
    "required": "V003",
    "enum": "V004",
    "range": "V005",
    "type": "V006",
    "unknown_field": "V007",
    "consistency": "V008",
}

REQUIRED_FIELDS: tuple[str, ...] = (
    "schema_version",
    "result_data.run_identity.tool_name",
    "result_data.run_identity.target_model",
)

# Pydantic error types mapped onto rule categories; anything else is "type".
_ERROR_RULES: dict[str, str] = {
    "missing": "required",
    "string_too_short": "required",
    "literal_error": "enum",
    "enum": "enum",
    "greater_than": "range",
    "greater_than_equal": "range",
    "less_than": "range",
    "less_than_equal": "range",
    "value_error": "range",
    "extra_forbidden": "unknown_field",
    "string_pattern_mismatch": "pattern",
}

# (field, rule, pattern, message) per underscore-separated filename part.
_COMPONENT_RULES: tuple[tuple[str, str, re.Pattern[str], str], ...] = (
    (
        "filename.tool_slug",
        "pattern",
        re.compile(r"^[a-z0-9-]+$"),
        "tool slug must use only lower-case letters, digits and hyphens",
    ),
    ("filename.model", "enum", re.compile(r"^model[AB]$"), "model must be modelA or modelB"),
    (
        "filename.api_style",
        "enum",
        re.compile(r"^(REST|GraphQL)$"),
        "API style must be REST or GraphQL",
    ),
    ("filename.run_number", "enum", re.compile(r"^run[12]$"), "run number must be run1 or run2"),
    ("filename.timestamp", "pattern", COMPACT_TIMESTAMP_PATTERN, "timestamp must be YYYYMMDDTHHMM"),
)


# Union member tags Pydantic appends to error locations.
_UNION_TAGS = frozenset({"int", "float", "str", "bool"})


def _loc_to_field_path(loc: tuple[str | int, ...]) -> str:
    """Convert a Pydantic error loc tuple to a dotted field path."""
    return ".".join(str(part) for part in loc if part not in _UNION_TAGS)


def validate_filename(filename: str) -> list[Violation]:
    """Check a filename against the canonical naming convention.

    When the whole name does not match, each component is checked on its
    own so the report names exactly which part is wrong.
    """
    name = Path(filename).name
    if FILENAME_PATTERN.match(name):
        stamp = name.rsplit("_", 1)[1].removesuffix(".json")
        try:
            datetime.strptime(stamp, "%Y%m%dT%H%M")
        except ValueError:
            return [
                Violation("filename.timestamp", "range", f"{stamp!r} is not a real date and time")
            ]
        return []

    violations = [
        Violation(
            "filename",
            "pattern",
            f"{name!r} does not follow {FILENAME_TEMPLATE} (e.g. {FILENAME_EXAMPLE})",
        )
    ]
    stem = name
    if name.endswith(".json"):
        stem = name[: -len(".json")]
    else:
        violations.append(Violation("filename.extension", "pattern", "extension must be .json"))

    parts = stem.rsplit("_", 4)
    if len(parts) != len(_COMPONENT_RULES):
        violations.append(
            Violation(
                "filename.parts",
                "pattern",
                f"expected {len(_COMPONENT_RULES)} underscore-separated parts, found {len(parts)}",
            )
        )
        return violations

    for (field, rule, pattern, message), part in zip(_COMPONENT_RULES, parts):
        if not pattern.match(part):
            violations.append(Violation(field, rule, f"{message}, got {part!r}"))
    return violations


def _check_required(data: dict[str, Any]) -> list[Violation]:
    violations = []
    for path in REQUIRED_FIELDS:
        value = jmespath.search(path, data)
        if value is None or (isinstance(value, str) and not value.strip()):
            violations.append(Violation(path, "required", "required field is missing or empty"))
    return violations


def _check_schema(data: dict[str, Any]) -> list[Violation]:
    version = data.get("schema_version")
    if version is None:
        return []
    model = DOCUMENT_MODELS.get(version) if isinstance(version, str) else None
    if model is None:
        supported = ", ".join(sorted(DOCUMENT_MODELS))
        return [
            Violation(
                "schema_version",
                "enum",
                f"unsupported schema version {version!r}; supported: {supported}",
            )
        ]
    try:
        model.model_validate(data)
    except ValidationError as e:
        violations = []
        for err in e.errors():
            error_type = err.get("type", "unknown")
            violations.append(
                Violation(
                    field=_loc_to_field_path(err.get("loc", ())),
                    rule=_ERROR_RULES.get(error_type, "type"),
                    message=err.get("msg", "Validation error"),
                )
            )
        return violations
    return []


def _check_consistency(data: dict[str, Any], filename: str) -> list[Violation]:
    """Compare filename components with the run identity inside the document."""
    parts = parse_filename(Path(filename).name)
    identity = jmespath.search("result_data.run_identity", data)
    if parts is None or not isinstance(identity, dict):
        return []

    violations = []
    tool_name = identity.get("tool_name")
    if isinstance(tool_name, str) and tool_name.strip() and tool_slug(tool_name) != parts.tool_slug:
        violations.append(
            Violation(
                "filename.tool_slug",
                "consistency",
                f"{parts.tool_slug!r} does not match tool_name {tool_name!r} "
                f"(expected {tool_slug(tool_name)!r})",
            )
        )
    for field, part, key in (
        ("filename.model", parts.model, "target_model"),
        ("filename.api_style", parts.api_style, "api_style"),
        ("filename.run_number", parts.run_number, "run_number"),
    ):
        value = identity.get(key)
        if value is not None and value != part:
            violations.append(
                Violation(field, "consistency", f"{part!r} does not match {key} {value!r}")
            )
    return violations


def _dedupe(violations: list[Violation]) -> list[Violation]:
    seen: set[tuple[str, str]] = set()
    unique = []
    for violation in violations:
        key = (violation.field, violation.rule)
        if key not in seen:
            seen.add(key)
            unique.append(violation)
    return unique


def validate_document(
    content: str | bytes | dict[str, Any],
    filename: str | None = None,
) -> list[Violation]:
    """Validate a result document and, optionally, its filename.

    Args:
        content: Raw JSON text or bytes, or already-parsed data.
        filename: Candidate filename; filename rules are skipped when None.

    Returns:
        Every violation found, in check order. An empty list means valid.
    """
    if isinstance(content, dict):
        data: Any = content
    else:
        try:
            data = json.loads(content)
        except (ValueError, UnicodeDecodeError) as e:
            found = [Violation("document", "well_formed", f"not valid JSON: {e}")]
            if filename is not None:
                found.extend(validate_filename(filename))
            return found

    if not isinstance(data, dict):
        found = [Violation("document", "well_formed", "top level must be a JSON object")]
        if filename is not None:
            found.extend(validate_filename(filename))
        return found

    violations: list[Violation] = []
    if filename is not None:
        violations.extend(validate_filename(filename))
    violations.extend(_check_required(data))
    violations.extend(_check_schema(data))
    if filename is not None:
        violations.extend(_check_consistency(data, filename))

    violations = _dedupe(violations)
    logger.debug("Validated %s: %d violation(s)", filename or "<document>", len(violations))
    return violations


def validate_result_file(path: Path) -> list[Violation]:
    """Read a result file from disk and validate it with its own filename."""
    try:
        content = path.read_bytes()
    except OSError as e:
        return [Violation("document", "well_formed", f"cannot read {path}: {e}")]
    return validate_document(content, filename=path.name)
