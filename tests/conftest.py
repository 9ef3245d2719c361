"""Shared fixtures: a representative AI run report and a run identity."""

import pytest

from reportforge.models.identity import RunIdentity

SAMPLE_REPORT = """\
# AI Run Report

## Timeline
- `generation_started`: 2025-12-17T10:00:00.000Z
- `code_complete`: 2025-12-17T10:25:00.000Z (estimated)
- `build_clean`: 2025-12-17T10:30:00Z
- `seed_loaded`: 2025-12-17T10:32:00.000Z
- `app_started`: 2025-12-17T10:35:00.000Z
- `all_tests_pass`: 2025-12-17T11:00:00.000Z

## Test Runs
- `test_run_1_start`: 2025-12-17T10:40:00.000Z
- `test_run_1_end`: 2025-12-17T10:42:30.000Z
- `test_run_1_total`: 40
- `test_run_1_passed`: 30
- `test_run_1_failed`: 10
- `test_run_2_start`: 2025-12-17T10:50:00.000Z
- `test_run_2_end`: 2025-12-17T10:51:00.000Z
- `test_run_2_total`: 40
- `test_run_2_passed`: 40
- `test_run_2_failed`: 0
- `test_iterations`: 2

## Test Summary
- **Total Tests**: 40
- **Passed**: 38
- **Failed**: 2
- **Pass Rate**: 95%

Final Pass Rate: 95% (38/40 passing)

## LLM Usage
- `backend_model_used`: claude-sonnet-4
- `backend_requests`: 120
- `backend_input_tokens`: 8.2M
- `backend_output_tokens`: 3M
- `estimated_cost`: $42.50 USD
- `usage_source`: tool_reported

## Operator
- `clarifications_count`: 1
- `interventions_count`: 0
- `reruns_count`: 2

## Tech Stack
- **Backend Runtime**: Node.js 20
- **Backend Framework**: Express
- **Database**: SQLite
"""

UI_SECTION = """\

## UI Implementation
- `ui_generation_started`: 2025-12-17T12:00:00.000Z
- `ui_code_complete`: 2025-12-17T12:20:00.000Z
- `ui_running`: 2025-12-17T12:30:00.000Z
- `ui_build_success`: true
- `backend_changes_required`: no
- `ui_model_used`: gpt-5
- `ui_tokens`: 850K
"""


@pytest.fixture
def sample_report() -> str:
    return SAMPLE_REPORT


@pytest.fixture
def report_with_ui() -> str:
    return SAMPLE_REPORT + UI_SECTION


@pytest.fixture
def identity() -> RunIdentity:
    return RunIdentity(
        tool_name="Cursor v0.43",
        tool_version="0.43.6",
        run_id="Cursor-v0.43-ModelA-20241218T1430",
        run_number=1,
        target_model="A",
        api_style="REST",
        spec_reference="v2.3.0",
        workspace_path="/work/runs/20241218T1430/PawMate",
        run_environment="Linux 6.8.0",
    )


@pytest.fixture
def ui_section() -> str:
    return UI_SECTION
