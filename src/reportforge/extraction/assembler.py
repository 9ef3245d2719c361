"""Metrics assembly -- builds CanonicalMetrics from raw report text.

Walks the versioned metrics contract below and resolves every field
through the pattern library, the timestamp and number normalizers, the
iteration parser and the duration calculator. Missing or malformed
fields degrade to None; assembly itself never fails on report content.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from reportforge.extraction.durations import duration_minutes
from reportforge.extraction.iterations import parse_iterations
from reportforge.extraction.numbers import normalize_ratio, number_from_raw, ratio_of
from reportforge.extraction.patterns import (
    DEFAULT_LIBRARY,
    FINAL_PASS_RATE_PATTERN,
    PatternLibrary,
    clean_value,
)
from reportforge.extraction.timestamps import extract_timestamp
from reportforge.models.config import PipelineConfig
from reportforge.models.metrics import (
    USAGE_SOURCES,
    AcceptanceSummary,
    CanonicalMetrics,
    Milestone,
    PhaseMetrics,
    TechStack,
    Timeline,
    UsageRecord,
)

logger = logging.getLogger(__name__)

METRICS_CONTRACT_VERSION = "1"


@dataclass(frozen=True)
class PhaseContract:
    """Field labels that make up one generation phase."""

    name: str
    milestones: tuple[str, ...]
    start_label: str
    end_labels: tuple[str, ...]
    model_labels: tuple[str, ...]
    requests_label: str
    total_tokens_label: str
    input_tokens_label: str
    output_tokens_label: str
    estimated_cost_label: str
    cost_currency_label: str
    usage_source_label: str


API_PHASE = PhaseContract(
    name="api",
    milestones=(
        "generation_started",
        "code_complete",
        "build_clean",
        "seed_loaded",
        "app_started",
        "all_tests_pass",
    ),
    start_label="generation_started",
    end_labels=("all_tests_pass", "app_started"),
    model_labels=("backend_model_used", "llm_model"),
    requests_label="requests_count",
    total_tokens_label="total_tokens",
    input_tokens_label="input_tokens",
    output_tokens_label="output_tokens",
    estimated_cost_label="estimated_cost",
    cost_currency_label="cost_currency",
    usage_source_label="usage_source",
)

UI_PHASE = PhaseContract(
    name="ui",
    milestones=("ui_generation_started", "ui_code_complete", "ui_running"),
    start_label="ui_generation_started",
    end_labels=("ui_running", "ui_code_complete"),
    model_labels=("ui_model_used", "ui_llm_model"),
    requests_label="ui_requests_count",
    total_tokens_label="ui_total_tokens",
    input_tokens_label="ui_input_tokens",
    output_tokens_label="ui_output_tokens",
    estimated_cost_label="ui_estimated_cost",
    cost_currency_label="ui_cost_currency",
    usage_source_label="ui_usage_source",
)

COUNTER_LABELS: tuple[str, ...] = ("clarifications_count", "interventions_count", "reruns_count")

TECH_STACK_LABELS: tuple[str, ...] = ("backend_runtime", "backend_framework", "database")

# Versioned contract: every label the assembler reads, grouped by purpose.
METRICS_CONTRACT: dict[str, tuple[str, ...]] = {
    "api_milestones": API_PHASE.milestones,
    "ui_milestones": UI_PHASE.milestones,
    "acceptance": ("tests_total", "tests_passed", "tests_failed", "tests_pass_rate"),
    "iterations": ("test_iterations",),
    "counters": COUNTER_LABELS,
    "tech_stack": TECH_STACK_LABELS,
    "ui_flags": ("ui_build_success", "backend_changes_required"),
}

_PLACEHOLDER_TEXT = frozenset({"unknown", "n/a", "na", "none", "tbd", "-", "?"})
_TRUE_WORDS = frozenset({"true", "yes", "y", "pass", "passed", "success", "succeeded", "✅"})
_FALSE_WORDS = frozenset({"false", "no", "n", "fail", "failed", "failure", "❌"})

_HEADING = re.compile(r"^[ \t]{0,3}(?P<hashes>#{1,6})[ \t]+(?P<title>.*)$")
_UI_HEADING = re.compile(
    r"(?<![A-Za-z0-9])UI(?![A-Za-z0-9])|user interface|frontend", re.IGNORECASE
)
_CURRENCY_CODE = re.compile(r"^[A-Za-z]{3}[ \t]+|[ \t]*[A-Za-z]{3}$")
# A line keyed by a UI-only field, in any of the key-value forms.
_UI_KEY_LINE = re.compile(
    r"(?<![A-Za-z0-9_])(?:ui_[A-Za-z0-9_]+|backend_changes_required)(?:`|\*\*)?[ \t]*[:=|]",
    re.IGNORECASE,
)


def _text(label: str, text: str | None, library: PatternLibrary) -> str | None:
    value = clean_value(library.match(label, text))
    if value is None or value.lower() in _PLACEHOLDER_TEXT:
        return None
    return value


def _number(label: str, text: str | None, library: PatternLibrary) -> int | float | None:
    return number_from_raw(label, library.match(label, text))


def _cost(label: str, text: str | None, library: PatternLibrary) -> int | float | None:
    value = clean_value(library.match(label, text))
    if value is None:
        return None
    return number_from_raw(label, _CURRENCY_CODE.sub("", value))


def _flag(label: str, text: str | None, library: PatternLibrary) -> bool | None:
    value = clean_value(library.match(label, text))
    if value is None:
        return None
    word = value.split()[0].lower().strip(".,;!")
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    logger.debug("Discarding unrecognized flag for %s: %r", label, value)
    return None


def _first_set(values: list[str | None]) -> str | None:
    for value in values:
        if value is not None:
            return value
    return None


def _has_ui_milestone(text: str, library: PatternLibrary) -> bool:
    return any(library.search(label, text) for label in UI_PHASE.milestones)


def _ui_heading_span(lines: list[str], library: PatternLibrary) -> tuple[int, int] | None:
    """Line span of the first UI-titled section that carries a UI milestone."""
    for index, line in enumerate(lines):
        heading = _HEADING.match(line)
        if heading is None or not _UI_HEADING.search(heading.group("title")):
            continue
        level = len(heading.group("hashes"))
        end = len(lines)
        for later in range(index + 1, len(lines)):
            nested = _HEADING.match(lines[later])
            if nested is not None and len(nested.group("hashes")) <= level:
                end = later
                break
        if _has_ui_milestone("\n".join(lines[index:end]), library):
            return index, end
    return None


def split_ui_section(
    text: str | None,
    library: PatternLibrary = DEFAULT_LIBRARY,
) -> tuple[str | None, str | None]:
    """Separate the UI part of a combined report from its API part.

    Nothing is split unless a UI milestone resolves to a timestamp. The UI
    part is the first UI-titled section (up to the next heading of the same
    or a higher level) plus any line outside it keyed by a `ui_*` field or
    `backend_changes_required`. Every other line stays with the API part.

    Returns:
        (api_text, ui_text); ui_text is None when no UI milestone resolves.
    """
    if not text:
        return text, None
    if not any(extract_timestamp(label, text, library) for label in UI_PHASE.milestones):
        return text, None

    lines = text.splitlines()
    start, end = _ui_heading_span(lines, library) or (0, 0)
    ui_lines = lines[start:end]
    api_lines: list[str] = []
    for index, line in enumerate(lines):
        if start <= index < end:
            continue
        if _UI_KEY_LINE.search(line):
            ui_lines.append(line)
        else:
            api_lines.append(line)
    return "\n".join(api_lines), "\n".join(ui_lines)


def assemble_usage(
    phase: PhaseContract,
    text: str | None,
    config: PipelineConfig,
    library: PatternLibrary = DEFAULT_LIBRARY,
) -> UsageRecord:
    """Resolve the usage counters of one phase and their provenance."""
    llm_model = _first_set([_text(label, text, library) for label in phase.model_labels])
    input_tokens = _number(phase.input_tokens_label, text, library)
    output_tokens = _number(phase.output_tokens_label, text, library)
    total_tokens = _number(phase.total_tokens_label, text, library)
    if total_tokens is None and input_tokens is not None and output_tokens is not None:
        total_tokens = input_tokens + output_tokens

    currency = _text(phase.cost_currency_label, text, library)
    currency = currency.upper() if currency else config.default_cost_currency

    source = (_text(phase.usage_source_label, text, library) or "").lower()
    if source not in USAGE_SOURCES:
        if any(v is not None for v in (total_tokens, input_tokens, output_tokens)):
            source = "tool_reported"
        else:
            source = "unknown"

    return UsageRecord(
        llm_model=llm_model,
        requests_count=_number(phase.requests_label, text, library),
        total_tokens=total_tokens,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        estimated_cost=_cost(phase.estimated_cost_label, text, library),
        cost_currency=currency,
        usage_source=source,
    )


def assemble_phase(
    phase: PhaseContract,
    text: str | None,
    config: PipelineConfig,
    library: PatternLibrary = DEFAULT_LIBRARY,
) -> PhaseMetrics:
    """Build the metrics of one generation phase from its report text."""
    timeline = Timeline(
        milestones=tuple(
            Milestone(label=label, timestamp=extract_timestamp(label, text, library))
            for label in phase.milestones
        )
    )
    start = timeline.get(phase.start_label)
    end = _first_set([timeline.get(label) for label in phase.end_labels])
    counters = {label: _number(label, text, library) for label in COUNTER_LABELS}
    return PhaseMetrics(
        timeline=timeline,
        usage=assemble_usage(phase, text, config, library),
        start_timestamp=start,
        end_timestamp=end,
        duration_minutes=duration_minutes(start, end, config.duration_precision),
        **counters,
    )


def assemble_acceptance(
    text: str | None,
    library: PatternLibrary = DEFAULT_LIBRARY,
) -> AcceptanceSummary:
    """Resolve the final accepted test counts.

    "Final Pass Rate: 95% (38/40 passing)" wins over the individual
    Total Tests / Passed / Failed / Pass Rate fields.
    """
    total: int | float | None = None
    passed: int | float | None = None
    ratio: float | None = None

    final = FINAL_PASS_RATE_PATTERN.search(text) if text else None
    if final is not None:
        passed = int(final.group("passed"))
        total = int(final.group("total"))
        ratio = normalize_ratio(final.group("rate") + "%")

    if total is None:
        total = _number("tests_total", text, library)
    if passed is None:
        passed = _number("tests_passed", text, library)
    failed = _number("tests_failed", text, library)
    if ratio is None:
        ratio = normalize_ratio(library.match("tests_pass_rate", text))
    if ratio is None:
        ratio = ratio_of(passed, total)

    return AcceptanceSummary(total=total, passed=passed, failed=failed, pass_ratio=ratio)


def assemble_metrics(
    report_text: str | None = None,
    ui_report_text: str | None = None,
    config: PipelineConfig | None = None,
    *,
    library: PatternLibrary = DEFAULT_LIBRARY,
) -> CanonicalMetrics:
    """Assemble CanonicalMetrics from a run report.

    Args:
        report_text: The AI run report; None when no report exists.
        ui_report_text: A separate UI run summary. When None, a UI section
            appended to report_text is used instead.
        config: Pipeline configuration; defaults apply when None.
        library: Pattern library used to locate fields.

    Returns:
        A fully populated CanonicalMetrics with None for every field that
        could not be derived.
    """
    config = config or PipelineConfig()
    api_text, appended_ui = split_ui_section(report_text, library)
    ui_text = ui_report_text if ui_report_text is not None else appended_ui

    api = assemble_phase(API_PHASE, api_text, config, library)

    ui: PhaseMetrics | None = None
    ui_build_success: bool | None = None
    ui_backend_changes: bool | None = None
    if ui_text:
        candidate = assemble_phase(UI_PHASE, ui_text, config, library)
        if candidate.timeline.observed:
            ui = candidate
            ui_build_success = _flag("ui_build_success", ui_text, library)
            ui_backend_changes = _flag("backend_changes_required", ui_text, library)
        else:
            logger.debug("UI report present but no UI milestone resolved; omitting UI phase")

    iterations = parse_iterations(
        api_text,
        config.iteration_family,
        library=library,
        precision=config.duration_precision,
    )
    iterations_count = _number("test_iterations", api_text, library)
    if iterations_count is None and iterations:
        iterations_count = len(iterations)

    metrics = CanonicalMetrics(
        contract_version=METRICS_CONTRACT_VERSION,
        api=api,
        ui=ui,
        iterations=iterations,
        test_iterations_count=iterations_count,
        acceptance=assemble_acceptance(api_text, library),
        tech_stack=TechStack(
            **{label: _text(label, api_text, library) for label in TECH_STACK_LABELS}
        ),
        ui_build_success=ui_build_success,
        ui_backend_changes_required=ui_backend_changes,
    )
    logger.debug(
        "Assembled metrics: %d/%d API milestones, %d iterations, ui=%s",
        sum(1 for m in api.timeline.milestones if m.timestamp is not None),
        len(api.timeline.milestones),
        len(iterations),
        ui is not None,
    )
    return metrics
