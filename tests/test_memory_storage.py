"""Tests specific to the in-memory backend."""

import pytest

from finance_tracker.models.records import RecordCategory
from finance_tracker.services.storage import (
    InMemoryStorage,
    InvalidRecordError,
    NotFoundError,
    RegionalExpenseStorageInterface,
    supports_regional_expenses,
)


class TestIdentifiers:
    """Identifier sequences."""

    def test_ids_start_at_one(self, memory_storage, run):
        """Test that the first record of each category gets id 1."""
        salary = run(memory_storage.add_salary({"amount": 1}))
        expense = run(memory_storage.add_expense({"amount": 1, "category": "a"}))
        regional = run(memory_storage.add_regional_expense({"amount": 1, "category": "a"}))

        assert (salary.id, expense.id, regional.id) == (1, 1, 1)

    def test_ids_are_not_reused_after_delete(self, memory_storage, run):
        """Test that a deleted id is never handed out again."""
        first = run(memory_storage.add_salary({"amount": 1}))
        run(memory_storage.delete_salary(first.id))

        second = run(memory_storage.add_salary({"amount": 2}))

        assert second.id == 2

    def test_rejected_input_does_not_consume_an_id(self, memory_storage, run):
        """Test that a failed add leaves the counter alone."""
        with pytest.raises(InvalidRecordError):
            run(memory_storage.add_expense({"amount": "x", "category": "a"}))

        expense = run(memory_storage.add_expense({"amount": 1, "category": "a"}))

        assert expense.id == 1

    def test_instances_do_not_share_state(self, run):
        """Test that two storages own separate data."""
        one = InMemoryStorage()
        two = InMemoryStorage()

        run(one.add_salary({"amount": 1}))

        assert run(two.list_salaries()) == []
        assert run(two.add_salary({"amount": 1})).id == 1


class TestRegionalExpenses:
    """The regional expense collection."""

    def test_memory_storage_supports_regional_expenses(self, memory_storage):
        """Test the capability check."""
        assert isinstance(memory_storage, RegionalExpenseStorageInterface)
        assert supports_regional_expenses(memory_storage) is True

    def test_regional_expenses_have_own_collection(self, memory_storage, run):
        """Test that regional expenses do not show up as expenses."""
        run(memory_storage.add_expense({"amount": 10, "category": "food"}))
        regional = run(memory_storage.add_regional_expense({
            "amount": "99.9",
            "category": "rent",
            "date": "2024-04-01",
        }))

        assert regional.amount == 99.9
        assert [e.category for e in run(memory_storage.list_regional_expenses())] == ["rent"]
        assert [e.category for e in run(memory_storage.list_expenses())] == ["food"]

    def test_update_regional_expense(self, memory_storage, run):
        """Test a partial update of a regional expense."""
        regional = run(memory_storage.add_regional_expense({
            "amount": 10,
            "category": "rent",
            "description": "flat",
        }))

        updated = run(memory_storage.update_regional_expense(regional.id, {"amount": "12"}))

        assert updated.amount == 12.0
        assert updated.description == "flat"

    def test_update_missing_regional_expense(self, memory_storage, run):
        """Test that a missing regional expense raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            run(memory_storage.update_regional_expense(3, {"amount": 1}))

        assert exc_info.value.category == RecordCategory.REGIONAL_EXPENSE
        assert str(exc_info.value) == "Regional expense with id 3 not found"

    def test_invalid_regional_expense_names_its_category(self, memory_storage, run):
        """Test that rejection errors identify the regional collection."""
        with pytest.raises(InvalidRecordError) as exc_info:
            run(memory_storage.add_regional_expense({"amount": 1}))

        assert exc_info.value.category == RecordCategory.REGIONAL_EXPENSE

    def test_delete_regional_expense(self, memory_storage, run):
        """Test deleting regional expenses, present and missing."""
        regional = run(memory_storage.add_regional_expense({"amount": 1, "category": "a"}))

        assert run(memory_storage.delete_regional_expense(regional.id)) is True
        assert run(memory_storage.delete_regional_expense(regional.id)) is False
        assert run(memory_storage.list_regional_expenses()) == []


class TestInternalState:
    """Callers cannot reach into the backend's lists."""

    def test_listed_sequence_is_a_copy(self, memory_storage, run):
        """Test that mutating a returned list does not change the store."""
        run(memory_storage.add_salary({"amount": 1}))

        listed = run(memory_storage.list_salaries())
        listed.clear()

        assert len(run(memory_storage.list_salaries())) == 1

    def test_update_replaces_record(self, memory_storage, run):
        """Test that a previously returned record is not mutated by an update."""
        salary = run(memory_storage.add_salary({"amount": 1, "month": "Jan"}))

        run(memory_storage.update_salary(salary.id, {"month": "Feb"}))

        assert salary.month == "Jan"

    def test_clear_keeps_counters(self, memory_storage, run):
        """Test that clear drops records but ids keep increasing."""
        run(memory_storage.add_salary({"amount": 1}))
        run(memory_storage.add_regional_expense({"amount": 1, "category": "a"}))

        memory_storage.clear()

        assert run(memory_storage.list_salaries()) == []
        assert run(memory_storage.list_regional_expenses()) == []
        assert run(memory_storage.add_salary({"amount": 2})).id == 2
