"""
Form Input Validation

DESIGN DECISION: The store assumes well-formed records. Turning raw form
input into well-formed records is the job of this module, which sits
between the presentation layer and the orchestrator.

Validation happens in two stages:

STAGE 1 - FORMAT:
- Required fields present
- Amounts parse as numbers
- Dates parse as ISO dates
- Enumerated choices are known values

STAGE 2 - SANITY (only if stage 1 passed):
- Non-positive amounts
- Unusually large amounts
- Deadlines already in the past

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for the user to correct.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from financeai.config import get_settings
from financeai.models.finance import (
    BudgetPeriod,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


RawValue = Union[str, int, float, Decimal, date, None]


class FormValidator:
    """
    Validates raw form submissions for transactions, budgets,
    savings goals and goal contributions.
    """

    def __init__(self, max_amount: Optional[float] = None):
        if max_amount is None:
            max_amount = get_settings().app.max_reasonable_amount
        self._max_amount = Decimal(str(max_amount))

    # -------------------------------------------------------------------------
    # Public forms
    # -------------------------------------------------------------------------

    def validate_transaction(
        self,
        transaction_type: RawValue,
        amount: RawValue,
        category: RawValue,
        description: RawValue = "",
        transaction_date: RawValue = None,
    ) -> ValidationResult:
        issues: list[ValidationIssue] = []
        cleaned: dict[str, Any] = {}

        cleaned["transaction_type"] = self._parse_choice(
            "type", transaction_type, TransactionType, issues
        )
        cleaned["amount"] = self._parse_amount("amount", amount, issues)
        cleaned["category"] = self._require_text("category", category, issues)
        cleaned["description"] = str(description or "").strip()
        if transaction_date in (None, ""):
            cleaned["transaction_date"] = date.today()
        else:
            cleaned["transaction_date"] = self._parse_date(
                "transaction_date", transaction_date, issues
            )

        if not issues:
            self._check_amount_sanity("amount", cleaned["amount"], issues)

        return ValidationResult(form="transaction", issues=issues, cleaned=cleaned)

    def validate_budget(
        self,
        category: RawValue,
        limit: RawValue,
        period: RawValue = BudgetPeriod.MONTHLY.value,
    ) -> ValidationResult:
        issues: list[ValidationIssue] = []
        cleaned: dict[str, Any] = {}

        cleaned["category"] = self._require_text("category", category, issues)
        cleaned["limit"] = self._parse_amount("limit", limit, issues)
        cleaned["period"] = self._parse_choice("period", period, BudgetPeriod, issues)

        if not issues:
            self._check_amount_sanity("limit", cleaned["limit"], issues)

        return ValidationResult(form="budget", issues=issues, cleaned=cleaned)

    def validate_goal(
        self,
        title: RawValue,
        target_amount: RawValue,
        deadline: RawValue,
        category: RawValue = "Other",
        today: Optional[date] = None,
    ) -> ValidationResult:
        issues: list[ValidationIssue] = []
        cleaned: dict[str, Any] = {}

        cleaned["title"] = self._require_text("title", title, issues)
        cleaned["target_amount"] = self._parse_amount("target_amount", target_amount, issues)
        cleaned["deadline"] = self._parse_date("deadline", deadline, issues)
        cleaned["category"] = str(category or "Other").strip() or "Other"

        if not issues:
            self._check_amount_sanity("target_amount", cleaned["target_amount"], issues)
            today = today or date.today()
            if cleaned["deadline"] < today:
                issues.append(ValidationIssue(
                    field="deadline",
                    issue_type="past_date",
                    message=f"Deadline ({cleaned['deadline']}) is already in the past",
                    severity="warning",
                    suggested_fix="Pick a future date unless this goal is overdue on purpose",
                ))

        return ValidationResult(form="goal", issues=issues, cleaned=cleaned)

    def validate_limit(self, limit: RawValue) -> ValidationResult:
        """Validate a new limit for an existing budget."""
        issues: list[ValidationIssue] = []
        cleaned = {"limit": self._parse_amount("limit", limit, issues)}
        if not issues:
            self._check_amount_sanity("limit", cleaned["limit"], issues)
        return ValidationResult(form="budget_limit", issues=issues, cleaned=cleaned)

    def validate_contribution(self, amount: RawValue) -> ValidationResult:
        issues: list[ValidationIssue] = []
        cleaned = {"amount": self._parse_amount("amount", amount, issues)}
        if not issues:
            self._check_amount_sanity("amount", cleaned["amount"], issues)
        return ValidationResult(form="contribution", issues=issues, cleaned=cleaned)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed!"

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please double-check:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # Stage 1 helpers
    # -------------------------------------------------------------------------

    def _require_text(
        self,
        field: str,
        value: RawValue,
        issues: list[ValidationIssue],
    ) -> Optional[str]:
        text = str(value).strip() if value is not None else ""
        if not text:
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{field.replace('_', ' ').capitalize()} is required",
                severity="error",
            ))
            return None
        return text

    def _parse_amount(
        self,
        field: str,
        value: RawValue,
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        if value is None or (isinstance(value, str) and not value.strip()):
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{field.replace('_', ' ').capitalize()} is required",
                severity="error",
            ))
            return None

        try:
            amount = Decimal(str(value).strip().replace(",", ""))
        except InvalidOperation:
            amount = None

        if amount is None or not amount.is_finite():
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"'{value}' is not a valid amount",
                severity="error",
                suggested_fix="Enter a number such as 120 or 45.50",
            ))
            return None

        if amount <= 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{field.replace('_', ' ').capitalize()} must be greater than zero",
                severity="error",
            ))
            return None

        return amount

    def _parse_date(
        self,
        field: str,
        value: RawValue,
        issues: list[ValidationIssue],
    ) -> Optional[date]:
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(str(value).strip())
        except (TypeError, ValueError):
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"'{value}' is not a valid date",
                severity="error",
                suggested_fix="Use the format YYYY-MM-DD",
            ))
            return None

    def _parse_choice(self, field, value, choices, issues):
        try:
            return choices(str(getattr(value, "value", value)).strip().lower())
        except ValueError:
            allowed = ", ".join(c.value for c in choices)
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"'{value}' is not a valid {field} (expected one of: {allowed})",
                severity="error",
            ))
            return None

    # -------------------------------------------------------------------------
    # Stage 2 helpers
    # -------------------------------------------------------------------------

    def _check_amount_sanity(
        self,
        field: str,
        amount: Decimal,
        issues: list[ValidationIssue],
    ) -> None:
        if amount > self._max_amount:
            issues.append(ValidationIssue(
                field=field,
                issue_type="suspicious_value",
                message=f"Amount ({amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))
