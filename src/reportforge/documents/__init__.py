"""Result documents -- building, naming and validating result files."""

from reportforge.documents.builder import (
    SCHEMA_BUILDERS,
    UnsupportedSchemaError,
    build_document,
    document_to_dict,
    serialize_document,
)
from reportforge.documents.filename import compose_filename, parse_filename, tool_slug
from reportforge.documents.validator import (
    RULE_CODES,
    Violation,
    validate_document,
    validate_filename,
    validate_result_file,
)

__all__ = [
    "RULE_CODES",
    "SCHEMA_BUILDERS",
    "UnsupportedSchemaError",
    "Violation",
    "build_document",
    "compose_filename",
    "document_to_dict",
    "parse_filename",
    "serialize_document",
    "tool_slug",
    "validate_document",
    "validate_filename",
    "validate_result_file",
]
