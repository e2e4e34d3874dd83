"""Tests for the shared normalization layer."""

from datetime import datetime, timezone

import pytest

from finance_tracker.models.records import RecordCategory, SalaryCreate
from finance_tracker.services.storage import InvalidRecordError
from finance_tracker.services.storage.normalize import (
    prepare_expense,
    prepare_expense_changes,
    prepare_salary,
    prepare_salary_changes,
)


class TestPrepareSalary:

    def test_created_at_is_now_even_with_a_date(self):
        """Test salaries are created now regardless of their date."""
        before = datetime.now(timezone.utc)
        values = prepare_salary({"amount": 1, "date": "2020-01-01"})

        assert values["date"] == datetime(2020, 1, 1, tzinfo=timezone.utc)
        assert values["created_at"] >= before

    def test_returns_every_column(self):
        """Test the result is a complete row without an id."""
        values = prepare_salary({})

        assert set(values) == {"amount", "month", "year", "notes", "date", "created_at"}

    def test_accepts_model_instances(self):
        """Test an input model can be passed instead of a dict."""
        values = prepare_salary(SalaryCreate(amount=5, month="May"))

        assert values["amount"] == 5.0
        assert values["month"] == "May"

    def test_rejects_non_mapping(self):
        """Test a list payload is rejected with a root-level error."""
        with pytest.raises(InvalidRecordError) as exc_info:
            prepare_salary(["amount", 1])

        assert exc_info.value.fields == ["__root__"]
        assert exc_info.value.category == RecordCategory.SALARY


class TestPrepareExpense:

    def test_created_at_follows_supplied_date(self):
        """Test an expense with a date is created on that date."""
        values = prepare_expense({"amount": 1, "category": "a", "date": "2024-01-15"})

        assert values["created_at"] == values["date"]

    def test_missing_date_uses_one_instant(self):
        """Test date and created_at share the same 'now'."""
        values = prepare_expense({"amount": 1, "category": "a"})

        assert values["date"] == values["created_at"]

    def test_error_message_lists_fields(self):
        """Test the error names every offending field."""
        with pytest.raises(InvalidRecordError) as exc_info:
            prepare_expense({"amount": "x", "date": "y"}, RecordCategory.REGIONAL_EXPENSE)

        error = exc_info.value
        assert set(error.fields) == {"amount", "category", "date"}
        assert error.category == RecordCategory.REGIONAL_EXPENSE
        assert "regional_expense" in str(error)


class TestPrepareChanges:

    def test_salary_changes_only_supplied(self):
        """Test only supplied salary fields are returned."""
        assert prepare_salary_changes({"month": "Mar"}) == {"month": "Mar"}

    def test_expense_changes_never_touch_created_at(self):
        """Test a new date does not produce a created_at change."""
        changes = prepare_expense_changes({"date": "2024-06-01", "created_at": "2024-06-01"})

        assert "created_at" not in changes
        assert changes["date"] == datetime(2024, 6, 1, tzinfo=timezone.utc)

    def test_identifier_cannot_be_changed(self):
        """Test an id in the payload is ignored."""
        assert prepare_expense_changes({"id": 12}) == {}

    def test_amount_string_becomes_float(self):
        """Test amount re-coercion on update."""
        assert prepare_salary_changes({"amount": "3000"}) == {"amount": 3000.0}
