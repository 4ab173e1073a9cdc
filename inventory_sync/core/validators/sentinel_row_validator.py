"""
SentinelRowValidator - rejects comment, section-divider and repeated-header rows.

The catalog spreadsheet is edited by hand and interleaves real products with
rows such as "# Rings", "FEATURED PRODUCTS SECTION" or a second copy of the
header row. Those rows carry no product and are skipped quietly.
"""

from typing import Any

from .base_validator import BaseValidator, ValidationError

DEFAULT_COMMENT_PREFIX = "#"
DEFAULT_SENTINELS = ("SECTION", "SUMMARY", "FEATURED PRODUCTS", "COLLECTIONS PAGE", "Note:")
DEFAULT_HEADER_LITERALS = ("Product ID",)


class SentinelRowValidator(BaseValidator):
    """
    Validates that an identifier cell is not a marker row.

    Parameters:
        comment_prefix: Leading marker for comment rows (default "#")
        sentinels: Substrings that mark divider rows (case-sensitive, as
            authored in the catalog)
        header_literals: Values that repeat the header row
    """

    def __init__(self, field_name: str = "product_id", parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.comment_prefix = self.parameters.get("comment_prefix", DEFAULT_COMMENT_PREFIX)
        self.sentinels = tuple(self.parameters.get("sentinels", DEFAULT_SENTINELS))
        self.header_literals = tuple(self.parameters.get("header_literals", DEFAULT_HEADER_LITERALS))

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if value is None:
            return
        text = str(value).strip()

        if self.comment_prefix and text.startswith(self.comment_prefix):
            raise ValidationError(
                rule_name="sentinel_row",
                field_name=self.field_name,
                message=f"Comment row '{text}'"
            )

        for sentinel in self.sentinels:
            if sentinel in text:
                raise ValidationError(
                    rule_name="sentinel_row",
                    field_name=self.field_name,
                    message=f"Section marker row '{text}'"
                )

        if text in self.header_literals:
            raise ValidationError(
                rule_name="sentinel_row",
                field_name=self.field_name,
                message="Repeated header row"
            )

    @property
    def rule_type(self) -> str:
        return "sentinel_row"
