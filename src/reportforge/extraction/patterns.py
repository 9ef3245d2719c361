"""Pattern library -- the declarative extraction contract for report fields.

Each logical field label maps to an ordered tuple of key aliases, and
every alias is tried in each textual form below. Forms are tried in
preference order (outer loop) before aliases (inner loop), so an exact
key-value form anywhere in the report always beats a looser in-sentence
mention. Keys are word-bounded: "Tests" never matches inside
"Total Tests" and "passed" never matches inside "test_run_1_passed".
"""

from __future__ import annotations

import re

_FLAGS = re.IGNORECASE | re.MULTILINE

# A key must not be glued to surrounding identifier characters.
_KEY_START = r"(?<![A-Za-z0-9_])"
_KEY_END = r"(?![A-Za-z0-9_])"

# Textual forms in preference order. "{key}" is replaced by an escaped alias.
FORMS: tuple[tuple[str, str], ...] = (
    # - `code_complete`: 2025-12-17T10:25:00.000Z
    ("backtick", r"`{key}(?:`[ \t]*:|:`)[ \t]*(?P<value>[^\n]*)"),
    # **Total Tests**: 42   or   **Total Tests:** 42
    ("bold", r"\*\*{key}(?:[ \t]*:\*\*|\*\*[ \t]*:)[ \t]*(?P<value>[^\n]*)"),
    # Total Tests: 42   (optionally list-bulleted)
    ("bare", r"^[ \t]*(?:[-*+][ \t]+)?{key}" + _KEY_END + r"[ \t]*[:=][ \t]*(?P<value>[^\n]*)"),
    # | Total Tests | 42 |
    ("table", r"^[ \t]*\|[ \t]*(?:\*\*|`)?{key}(?:\*\*|`)?[ \t]*\|[ \t]*(?P<value>[^|\n]*)"),
    # The suite reported Total Tests of: 42
    ("inline", _KEY_START + r"{key}" + _KEY_END + r"[^\n:]*:[ \t]*(?P<value>[^\n]*)"),
)

# Logical field label -> key aliases, most specific first.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    # API phase milestones
    "generation_started": ("generation_started",),
    "code_complete": ("code_complete",),
    "build_clean": ("build_clean",),
    "seed_loaded": ("seed_loaded",),
    "app_started": ("app_started",),
    "all_tests_pass": ("all_tests_pass",),
    # UI phase milestones
    "ui_generation_started": ("ui_generation_started",),
    "ui_code_complete": ("ui_code_complete",),
    "ui_running": ("ui_running",),
    # Final test summary
    "tests_total": ("Total Tests", "tests_total"),
    "tests_passed": ("Passed", "tests_passed"),
    "tests_failed": ("Failed", "tests_failed"),
    "tests_pass_rate": ("Pass Rate", "tests_pass_rate"),
    "test_iterations": ("test_iterations", "test_iterations_count"),
    # Operator intervention counters
    "clarifications_count": ("clarifications_count", "clarifications"),
    "interventions_count": ("interventions_count", "interventions"),
    "reruns_count": ("reruns_count", "reruns"),
    # API phase usage
    "backend_model_used": ("backend_model_used",),
    "llm_model": ("LLM Model", "llm_model"),
    "requests_count": ("backend_requests", "requests_count"),
    "total_tokens": ("backend_tokens", "total_tokens"),
    "input_tokens": ("backend_input_tokens", "input_tokens"),
    "output_tokens": ("backend_output_tokens", "output_tokens"),
    "estimated_cost": ("backend_estimated_cost", "estimated_cost", "estimated_cost_usd"),
    "cost_currency": ("backend_cost_currency", "cost_currency"),
    "usage_source": ("backend_usage_source", "usage_source"),
    # UI phase usage
    "ui_model_used": ("ui_model_used",),
    "ui_llm_model": ("LLM Model", "llm_model"),
    "ui_requests_count": ("ui_requests", "requests_count"),
    "ui_total_tokens": ("ui_tokens", "total_tokens"),
    "ui_input_tokens": ("ui_input_tokens", "input_tokens"),
    "ui_output_tokens": ("ui_output_tokens", "output_tokens"),
    "ui_estimated_cost": ("ui_estimated_cost", "estimated_cost", "estimated_cost_usd"),
    "ui_cost_currency": ("ui_cost_currency", "cost_currency"),
    "ui_usage_source": ("ui_usage_source", "usage_source"),
    # UI outcome flags
    "ui_build_success": ("ui_build_success", "build_success"),
    "backend_changes_required": ("ui_backend_changes_required", "backend_changes_required"),
    # Tech stack
    "backend_runtime": ("Backend Runtime",),
    "backend_framework": ("Backend Framework",),
    "database": ("Database",),
}

# Indexed family fields. "{family}" and "{n}" are filled per ordinal.
ITERATION_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "start": ("{family}_{n}_start",),
    "end": ("{family}_{n}_end",),
    "total": ("{family}_{n}_total",),
    "passed": ("{family}_{n}_passed",),
    "failed": ("{family}_{n}_failed",),
    "pass_rate": ("{family}_{n}_pass_rate", "{family}_{n}_passrate"),
}

# "Final Pass Rate: 95% (38/40 passing)" carries three values on one line.
FINAL_PASS_RATE_PATTERN = re.compile(
    r"Final\s+Pass\s+Rate[^\n:]*:[ \t]*(?:\*\*)?[ \t]*(?P<rate>\d+(?:\.\d+)?)[ \t]*%?"
    r"(?:\*\*)?[ \t]*\([ \t]*(?P<passed>\d+)[ \t]*/[ \t]*(?P<total>\d+)"
    r"[ \t]*(?:tests[ \t]+)?passing[ \t]*\)",
    re.IGNORECASE,
)

_EMPHASIS = re.compile(r"\*\*|`")
_BRACKETED = re.compile(r"\[[^\]\n]*\]")


def _key_regex(alias: str) -> str:
    """Escape an alias, letting any run of whitespace stand for a space."""
    return r"\s+".join(re.escape(part) for part in alias.split())


def clean_value(raw: str | None) -> str | None:
    """Strip markdown emphasis, placeholders and trailing annotations.

    "**2025-12-17T10:25:00.000Z** (estimated)" -> "2025-12-17T10:25:00.000Z"

    Returns None when nothing is left.
    """
    if raw is None:
        return None
    value = _EMPHASIS.sub("", raw)
    value = _BRACKETED.sub("", value)
    value = value.split("(", 1)[0]
    value = value.strip().rstrip(".,;").strip()
    return value or None


class PatternLibrary:
    """Ordered (label -> textual forms) table with first-match lookup.

    Args:
        aliases: Label -> key aliases table. Defaults to FIELD_ALIASES.
        forms: Ordered (name, template) pairs. Defaults to FORMS.
    """

    def __init__(
        self,
        aliases: dict[str, tuple[str, ...]] | None = None,
        forms: tuple[tuple[str, str], ...] = FORMS,
    ) -> None:
        self._aliases = dict(FIELD_ALIASES if aliases is None else aliases)
        self._forms = tuple(forms)

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(self._aliases)

    def aliases_for(self, label: str) -> tuple[str, ...]:
        """Return the key aliases for label; unknown labels match themselves."""
        return self._aliases.get(label, (label,))

    def patterns_for(self, label: str) -> list[re.Pattern[str]]:
        """Return compiled patterns for label in the order they are tried."""
        return self._compile(self.aliases_for(label))

    def _compile(self, aliases: tuple[str, ...]) -> list[re.Pattern[str]]:
        patterns: list[re.Pattern[str]] = []
        for _name, template in self._forms:
            for alias in aliases:
                patterns.append(re.compile(template.replace("{key}", _key_regex(alias)), _FLAGS))
        return patterns

    def search(self, label: str, text: str | None) -> re.Match[str] | None:
        """Return the first match for label in text, or None."""
        if not text:
            return None
        return self._first_match(self.patterns_for(label), text)

    def match(self, label: str, text: str | None) -> str | None:
        """Return the raw value substring for label, or None if absent."""
        found = self.search(label, text)
        if found is None:
            return None
        return found.group("value")

    def match_iteration(
        self,
        ordinal: int,
        field: str,
        text: str | None,
        family: str = "test_run",
    ) -> str | None:
        """Return the raw value of one field of an indexed iteration family."""
        if not text:
            return None
        aliases = tuple(
            template.format(family=family, n=ordinal)
            for template in ITERATION_FIELD_ALIASES[field]
        )
        found = self._first_match(self._compile(aliases), text)
        if found is None:
            return None
        return found.group("value")

    def ordinals(self, text: str | None, family: str = "test_run") -> list[int]:
        """Return iteration ordinals in discovery order, first occurrence only."""
        if not text:
            return []
        pattern = re.compile(
            _KEY_START + re.escape(family) + r"_(\d+)_start" + _KEY_END, re.IGNORECASE
        )
        seen: list[int] = []
        for found in pattern.finditer(text):
            ordinal = int(found.group(1))
            if ordinal not in seen:
                seen.append(ordinal)
        return seen

    @staticmethod
    def _first_match(patterns: list[re.Pattern[str]], text: str) -> re.Match[str] | None:
        for pattern in patterns:
            found = pattern.search(text)
            if found is not None:
                return found
        return None


def iteration_label(ordinal: int, field: str, family: str = "test_run") -> str:
    """Return the canonical report key for one iteration field."""
    return f"{family}_{ordinal}_{field}"


DEFAULT_LIBRARY = PatternLibrary()
