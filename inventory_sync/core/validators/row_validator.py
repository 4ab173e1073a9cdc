"""
RowValidator - runs the row rules in order and reports skips as diagnostics.
"""

from typing import Iterable

from inventory_sync.core.models import RowDiagnostic, SourceRow
from inventory_sync.observability.logger import get_logger

from .base_validator import BaseValidator, ValidationError
from .required_field_validator import RequiredFieldValidator
from .sentinel_row_validator import SentinelRowValidator

logger = get_logger(__name__)


class RowValidator:
    """
    Validates mapped rows against an ordered list of rules.

    Each rule carries a severity. Blank identifiers and marker rows are
    expected noise in the catalog ("warning"); a real product row without a
    name is a data error ("error"). The first failing rule decides.

    Args:
        rules: (validator, severity) pairs, evaluated in order
    """

    def __init__(self, rules: list[tuple[BaseValidator, str]] | None = None):
        self.rules = rules if rules is not None else self.default_rules()

    @staticmethod
    def default_rules(sentinel_params: dict | None = None) -> list[tuple[BaseValidator, str]]:
        return [
            (RequiredFieldValidator("product_id"), "warning"),
            (SentinelRowValidator("product_id", sentinel_params), "warning"),
            (RequiredFieldValidator("name"), "error"),
        ]

    def _first_failure(self, row: SourceRow) -> tuple[ValidationError, str] | None:
        for validator, severity in self.rules:
            try:
                validator.validate(row.values.get(validator.field_name), row.values)
            except ValidationError as e:
                return e, severity
        return None

    def validate(self, row: SourceRow) -> list[ValidationError]:
        """Return the failing rule for the row (empty list when valid)."""
        failure = self._first_failure(row)
        return [failure[0]] if failure else []

    def check(self, row: SourceRow) -> RowDiagnostic | None:
        """Validate one row and turn a failure into a RowDiagnostic."""
        failure = self._first_failure(row)
        if failure is None:
            return None
        error, severity = failure
        return RowDiagnostic(
            row_number=row.row_number,
            product_id=row.product_id or None,
            rule=error.rule_name,
            message=f"{error.field_name}: {error.message}",
            severity=severity,
        )

    def partition(self, rows: Iterable[SourceRow]) -> tuple[list[SourceRow], list[RowDiagnostic]]:
        """
        Split rows into valid rows and skip diagnostics.

        Entirely blank rows are dropped without a diagnostic.
        """
        valid: list[SourceRow] = []
        diagnostics: list[RowDiagnostic] = []

        for row in rows:
            if row.is_blank():
                continue
            diagnostic = self.check(row)
            if diagnostic is None:
                valid.append(row)
            else:
                diagnostics.append(diagnostic)

        logger.info(
            f"Validated rows: {len(valid)} valid, {len(diagnostics)} skipped",
            extra={"valid": len(valid), "skipped": len(diagnostics)},
        )
        return valid, diagnostics


def find_duplicates(rows: list[SourceRow]) -> tuple[list[SourceRow], list[RowDiagnostic]]:
    """
    Resolve repeated product identifiers within one source.

    The last occurrence wins; each superseded occurrence is reported as an
    error diagnostic. Surviving rows keep source order.
    """
    last_index = {row.product_id: i for i, row in enumerate(rows)}
    kept: list[SourceRow] = []
    diagnostics: list[RowDiagnostic] = []

    for i, row in enumerate(rows):
        winner = last_index[row.product_id]
        if i == winner:
            kept.append(row)
            continue
        diagnostics.append(RowDiagnostic(
            row_number=row.row_number,
            product_id=row.product_id,
            rule="duplicate_product_id",
            message=f"Duplicate product id, superseded by row {rows[winner].row_number}",
            severity="error",
        ))

    if diagnostics:
        logger.warning(
            f"Found {len(diagnostics)} duplicate product id rows",
            extra={"duplicates": [d.product_id for d in diagnostics]},
        )
    return kept, diagnostics
