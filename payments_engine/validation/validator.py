"""
Two-Stage Record Validation

DESIGN DECISION: Raw records are validated in two stages before they
can reach the engine:

STAGE 1 - SHAPE:
- Required columns present and non-empty
- Known transaction kind
- Amount present exactly when the kind moves funds

STAGE 2 - TYPES AND RANGES (pydantic):
- Integer ids within range
- Amount is a finite, non-negative decimal

Stage 2 is skipped when stage 1 fails, so every issue message
describes the actual problem instead of a cascade.

IMPORTANT: Validation NEVER fixes a record. A malformed record is
reported and skipped; it cannot affect any account.
"""

from typing import Mapping, Optional

from pydantic import ValidationError

from payments_engine.models.outcome import ValidationIssue
from payments_engine.models.transaction import Transaction, TransactionKind


class MalformedTransactionError(Exception):
    """Raw record that cannot be turned into a Transaction."""

    def __init__(
        self,
        issues: list[ValidationIssue],
        line_number: Optional[int] = None,
    ):
        self.issues = issues
        self.line_number = line_number
        where = f"line {line_number}: " if line_number is not None else ""
        summary = "; ".join(f"{i.field}: {i.message}" for i in issues)
        super().__init__(f"Malformed transaction record ({where}{summary})")


_KINDS = {kind.value for kind in TransactionKind}


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class TransactionValidator:
    """
    Turns raw records (column name -> text) into validated Transactions.
    """

    def parse(
        self,
        raw: Mapping[str, Optional[str]],
        line_number: Optional[int] = None,
    ) -> Transaction:
        """
        Validate a raw record.

        Raises:
            MalformedTransactionError: with every issue found
        """
        record = {
            "type": _clean(raw.get("type")),
            "client": _clean(raw.get("client")),
            "tx": _clean(raw.get("tx")),
            "amount": _clean(raw.get("amount")),
        }

        issues = self._validate_shape(record)
        if issues:
            raise MalformedTransactionError(issues, line_number)

        record["type"] = record["type"].lower()
        try:
            return Transaction.model_validate(record)
        except ValidationError as e:
            raise MalformedTransactionError(
                self._issues_from_error(e), line_number
            ) from e

    def _validate_shape(
        self,
        record: dict[str, Optional[str]],
    ) -> list[ValidationIssue]:
        """
        Stage 1: shape validation.

        Returns: list_of_issues (empty when the shape is fine)
        """
        issues = []

        kind = record["type"]
        if kind is None:
            issues.append(ValidationIssue(
                field="type",
                issue_type="missing",
                message="Transaction type is required",
            ))
        elif kind.lower() not in _KINDS:
            issues.append(ValidationIssue(
                field="type",
                issue_type="unknown_kind",
                message=f"Unknown transaction type: {kind}",
            ))

        for column in ("client", "tx"):
            if record[column] is None:
                issues.append(ValidationIssue(
                    field=column,
                    issue_type="missing",
                    message=f"Column '{column}' is required",
                ))

        if kind is not None and kind.lower() in _KINDS:
            moves_funds = TransactionKind(kind.lower()).moves_funds
            if moves_funds and record["amount"] is None:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message=f"{kind.lower()} requires an amount",
                ))
            elif not moves_funds and record["amount"] is not None:
                issues.append(ValidationIssue(
                    field="amount",
                    issue_type="unexpected",
                    message=f"{kind.lower()} must not carry an amount",
                ))

        return issues

    def _issues_from_error(self, error: ValidationError) -> list[ValidationIssue]:
        """Stage 2: translate pydantic errors into issues."""
        issues = []
        for err in error.errors():
            loc = err.get("loc") or ()
            field = str(loc[0]) if loc else "amount"
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=err.get("msg", "Invalid value"),
            ))
        return issues
