"""Canonical result filename composition.

{tool-slug}_model{A|B}_{REST|GraphQL}_run{1|2}_{YYYYMMDDTHHMM}.json

The filename depends only on run identity and the run timestamp, never
on extracted metrics.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

from reportforge.models.identity import RunIdentity

FILENAME_PATTERN = re.compile(
    r"^(?P<tool_slug>[a-z0-9-]+)_model(?P<model>[AB])_(?P<api_style>REST|GraphQL)"
    r"_run(?P<run_number>[12])_(?P<timestamp>[0-9]{8}T[0-9]{4})\.json$"
)
FILENAME_TEMPLATE = "{tool-slug}_{model}_{api-type}_{run-number}_{timestamp}.json"
FILENAME_EXAMPLE = "cursor-v0-43_modelA_REST_run1_20241218T1430.json"

COMPACT_TIMESTAMP_PATTERN = re.compile(r"^[0-9]{8}T[0-9]{4}$")

_NON_SLUG = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN = re.compile(r"-{2,}")


@dataclass(frozen=True)
class FilenameParts:
    """Components recovered from a canonical filename."""

    tool_slug: str
    model: str
    api_style: str
    run_number: int
    timestamp: str


def tool_slug(tool_name: str) -> str:
    """Lower-case, hyphenate anything outside [a-z0-9-], collapse hyphens.

    "Cursor v0.43" -> "cursor-v0-43"
    """
    slug = _NON_SLUG.sub("-", tool_name.lower())
    return _HYPHEN_RUN.sub("-", slug).strip("-")


def compact_timestamp(value: datetime | str) -> str:
    """Render a run timestamp as YYYYMMDDTHHMM.

    Raises:
        ValueError: If value is a string not already in compact form.
    """
    if isinstance(value, datetime):
        return value.strftime("%Y%m%dT%H%M")
    if not COMPACT_TIMESTAMP_PATTERN.match(value):
        raise ValueError(f"Run timestamp {value!r} is not in YYYYMMDDTHHMM form")
    return value


def compose_filename(identity: RunIdentity, timestamp: datetime | str) -> str:
    """Build the canonical result filename for a run."""
    return (
        f"{tool_slug(identity.tool_name)}_model{identity.target_model}"
        f"_{identity.api_style}_run{identity.run_number}"
        f"_{compact_timestamp(timestamp)}.json"
    )


def parse_filename(filename: str) -> FilenameParts | None:
    """Split a canonical filename into its parts, or None if it does not conform."""
    found = FILENAME_PATTERN.match(filename)
    if found is None:
        return None
    return FilenameParts(
        tool_slug=found.group("tool_slug"),
        model=found.group("model"),
        api_style=found.group("api_style"),
        run_number=int(found.group("run_number")),
        timestamp=found.group("timestamp"),
    )
