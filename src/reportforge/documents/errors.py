"""Violation formatter with dual-mode output (rich human and CI concise).

Human mode produces compiler-style blocks grouped per file; CI mode
produces one `file -- field: message [code]` line per violation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reportforge.documents.validator import RULE_CODES

if TYPE_CHECKING:
    from reportforge.documents.validator import Violation


# Human-readable descriptions for rule codes
RULE_DESCRIPTIONS: dict[str, str] = {
    "V001": "malformed document",
    "V002": "pattern mismatch",
    "V003": "required field missing",
    "V004": "value outside allowed set",
    "V005": "value out of range",
    "V006": "type mismatch",
    "V007": "unknown field",
    "V008": "filename and identity disagree",
}


def format_violation(violation: Violation, ci_mode: bool = False) -> str:
    """Render one violation as a single line.

    CI mode appends the short rule code so log parsers can group failures.
    """
    if ci_mode:
        return f"{violation.field}: {violation.message} [{RULE_CODES.get(violation.rule, 'V999')}]"
    return f"{violation.field}: {violation.message} ({violation.rule})"


class ViolationFormatter:
    """Formats validation violations for human or CI consumption.

    Args:
        ci_mode: If True, use CI-friendly concise output.
    """

    def __init__(self, ci_mode: bool = False) -> None:
        self.ci_mode = ci_mode

    @staticmethod
    def rule_code(rule: str) -> str:
        return RULE_CODES.get(rule, "V999")

    def format_violation(self, violation: Violation, filename: str) -> str:
        """Format a single violation for display."""
        code = self.rule_code(violation.rule)
        if self.ci_mode:
            return f"{filename} -- {format_violation(violation, ci_mode=True)}"
        description = RULE_DESCRIPTIONS.get(code, "validation error")
        return "\n".join(
            [
                f"error[{code}]: {description}",
                f"  --> {filename}",
                "   |",
                f"   | {violation.field}: {violation.message}",
                "   |",
            ]
        )

    def format_all(self, violations: list[Violation], filename: str) -> str:
        """Format all violations; human blocks are separated by blank lines."""
        separator = "\n" if self.ci_mode else "\n\n"
        return separator.join(self.format_violation(v, filename) for v in violations)
