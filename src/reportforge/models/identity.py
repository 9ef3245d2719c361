"""Run identity model.

Captures the caller-supplied fields that identify a single benchmark
run. These are produced by the run initializer and passed in verbatim.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

TargetModel = Literal["A", "B"]
ApiStyle = Literal["REST", "GraphQL"]

TARGET_MODELS: tuple[str, ...] = ("A", "B")
API_STYLES: tuple[str, ...] = ("REST", "GraphQL")
RUN_NUMBERS: tuple[int, ...] = (1, 2)


class RunIdentity(BaseModel):
    """Immutable identity of one benchmark run.

    Every string field except tool_version must be non-empty.
    """

    model_config = {"extra": "forbid", "frozen": True, "str_strip_whitespace": True}

    tool_name: str = Field(min_length=1)
    tool_version: str = ""
    run_id: str = Field(min_length=1)
    run_number: Literal[1, 2]
    target_model: TargetModel
    api_style: ApiStyle
    spec_reference: str = Field(min_length=1)
    workspace_path: str = Field(min_length=1)
    run_environment: str = Field(min_length=1)
