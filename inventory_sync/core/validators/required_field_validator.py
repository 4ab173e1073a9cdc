"""
RequiredFieldValidator - ensures a mapped cell is present and not blank.
"""

from typing import Any

from .base_validator import BaseValidator, ValidationError


class RequiredFieldValidator(BaseValidator):
    """
    Validates that a required cell holds a value.

    Fails if:
    - The column was not mapped at all
    - The cell is empty (None)
    - The cell is whitespace only
    """

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if self.field_name not in record:
            raise ValidationError(
                rule_name="required_field",
                field_name=self.field_name,
                message="Column is missing from the spreadsheet"
            )

        if value is None or str(value).strip() == "":
            raise ValidationError(
                rule_name="required_field",
                field_name=self.field_name,
                message="Cell is empty"
            )

    @property
    def rule_type(self) -> str:
        return "required_field"
