"""Report extraction -- patterns, normalizers, iteration parsing and assembly."""

from reportforge.extraction.assembler import (
    METRICS_CONTRACT,
    METRICS_CONTRACT_VERSION,
    assemble_metrics,
    split_ui_section,
)
from reportforge.extraction.durations import duration_minutes
from reportforge.extraction.iterations import parse_iterations
from reportforge.extraction.numbers import normalize_number, normalize_ratio
from reportforge.extraction.patterns import (
    DEFAULT_LIBRARY,
    PatternLibrary,
    clean_value,
    iteration_label,
)
from reportforge.extraction.timestamps import extract_timestamp, normalize_timestamp

__all__ = [
    "DEFAULT_LIBRARY",
    "METRICS_CONTRACT",
    "METRICS_CONTRACT_VERSION",
    "PatternLibrary",
    "assemble_metrics",
    "clean_value",
    "duration_minutes",
    "extract_timestamp",
    "iteration_label",
    "normalize_number",
    "normalize_ratio",
    "normalize_timestamp",
    "parse_iterations",
    "split_ui_section",
]
