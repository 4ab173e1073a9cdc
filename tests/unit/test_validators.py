"""
Unit tests for row validation rules.

Includes property-based testing with hypothesis for validators.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from inventory_sync.core.models import SourceRow
from inventory_sync.core.validators import (
    RequiredFieldValidator,
    RowValidator,
    SentinelRowValidator,
    ValidationError,
    find_duplicates,
)


def row(number, product_id="NJ-001", name="Rose Gold Ring", **values):
    return SourceRow(row_number=number, values={"product_id": product_id, "name": name, **values})


class TestRequiredFieldValidator:
    """Tests for RequiredFieldValidator"""

    def test_present_value_passes(self):
        validator = RequiredFieldValidator("name")
        validator.validate("Ring", {"name": "Ring"})  # Should not raise

    def test_unmapped_column_fails(self):
        validator = RequiredFieldValidator("name")

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(None, {"product_id": "NJ-001"})

        assert "missing" in str(exc_info.value).lower()
        assert exc_info.value.field_name == "name"

    def test_whitespace_cell_fails(self):
        validator = RequiredFieldValidator("name")

        with pytest.raises(ValidationError) as exc_info:
            validator.validate("   ", {"name": "   "})

        assert "empty" in str(exc_info.value).lower()


class TestSentinelRowValidator:
    """Tests for SentinelRowValidator"""

    @pytest.mark.parametrize("value", [
        "# Rings",
        "FEATURED PRODUCTS SECTION",
        "COLLECTIONS PAGE",
        "Note: prices include GST",
        "Product ID",
    ])
    def test_marker_rows_rejected(self, value):
        validator = SentinelRowValidator()

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(value, {"product_id": value})

        assert exc_info.value.rule_name == "sentinel_row"

    def test_custom_comment_prefix(self):
        validator = SentinelRowValidator(parameters={"comment_prefix": "//", "sentinels": []})

        validator.validate("# not a comment here", {})  # Should not raise
        with pytest.raises(ValidationError):
            validator.validate("// skipped", {})

    @given(st.from_regex(r"NJ-[A-Z]{3}-[0-9]{3}", fullmatch=True))
    def test_property_product_codes_pass(self, value):
        """Property test: ordinary product codes are never marker rows"""
        SentinelRowValidator().validate(value, {"product_id": value})


class TestRowValidator:
    """Tests for RowValidator"""

    def test_valid_row_has_no_diagnostic(self):
        assert RowValidator().check(row(2)) is None

    def test_comment_row_is_warning(self):
        diagnostic = RowValidator().check(row(3, product_id="# Necklaces", name=None))

        assert diagnostic.rule == "sentinel_row"
        assert diagnostic.severity == "warning"
        assert diagnostic.row_number == 3

    def test_blank_identifier_is_warning(self):
        diagnostic = RowValidator().check(row(4, product_id=None))

        assert diagnostic.rule == "required_field"
        assert diagnostic.severity == "warning"
        assert diagnostic.product_id is None

    def test_missing_name_is_error(self):
        diagnostic = RowValidator().check(row(5, product_id="NJ-005", name=""))

        assert diagnostic.rule == "required_field"
        assert diagnostic.severity == "error"
        assert diagnostic.product_id == "NJ-005"
        assert diagnostic.message == "name: Cell is empty"

    def test_validate_returns_first_failure_only(self):
        errors = RowValidator().validate(row(6, product_id=None, name=None))

        assert len(errors) == 1
        assert errors[0].field_name == "product_id"

    def test_partition_drops_blank_rows_silently(self):
        rows = [
            row(2),
            SourceRow(row_number=3, values={"product_id": None, "name": "  "}),
            row(4, product_id="SUMMARY", name=None),
            row(5, product_id="NJ-002"),
        ]

        valid, diagnostics = RowValidator().partition(rows)

        assert [r.row_number for r in valid] == [2, 5]
        assert [d.row_number for d in diagnostics] == [4]


class TestFindDuplicates:
    """Tests for duplicate identifier resolution"""

    def test_last_occurrence_wins(self):
        rows = [row(2, "NJ-001", "Old"), row(3, "NJ-002"), row(4, "NJ-001", "New")]

        kept, diagnostics = find_duplicates(rows)

        assert [(r.row_number, r.name) for r in kept] == [(3, "Rose Gold Ring"), (4, "New")]
        assert len(diagnostics) == 1
        assert diagnostics[0].row_number == 2
        assert diagnostics[0].rule == "duplicate_product_id"
        assert diagnostics[0].severity == "error"
        assert "row 4" in diagnostics[0].message

    def test_unique_rows_untouched(self):
        rows = [row(2, "NJ-001"), row(3, "NJ-002")]
        kept, diagnostics = find_duplicates(rows)

        assert kept == rows
        assert diagnostics == []
