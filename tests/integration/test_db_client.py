"""Integration tests for the SQLite client against a real database file."""

import pytest

from pms.core import db_client
from pms.core.db_client import RecordNotFoundError


pytestmark = pytest.mark.integration


def _employee(code: str, first_name: str, department: str = "Finance") -> dict:
    return {
        "employee_code": code,
        "first_name": first_name,
        "last_name": "Okafor",
        "email": f"{first_name.lower()}@example.com",
        "department": department,
        "status": "active",
        "on_payroll": True,
    }


class TestCrud:
    async def test_create_and_get(self, sqlite_db):
        created = await db_client.create_record(collection="employees", data=_employee("EMP-1", "Amina"))

        fetched = await db_client.get_record(collection="employees", record_id=created["id"])

        assert isinstance(created["id"], str)
        assert fetched["first_name"] == "Amina"
        assert fetched["on_payroll"] is True
        assert fetched["created"] == fetched["updated"]

    async def test_update_merges_fields(self, sqlite_db):
        created = await db_client.create_record(collection="employees", data=_employee("EMP-1", "Amina"))

        updated = await db_client.update_record(
            collection="employees", record_id=created["id"], data={"on_payroll": False, "status": "archived"}
        )

        assert updated["on_payroll"] is False
        assert updated["status"] == "archived"
        assert updated["first_name"] == "Amina"

    async def test_delete(self, sqlite_db):
        created = await db_client.create_record(collection="employees", data=_employee("EMP-1", "Amina"))

        await db_client.delete_record(collection="employees", record_id=created["id"])

        with pytest.raises(RecordNotFoundError):
            await db_client.get_record(collection="employees", record_id=created["id"])

    async def test_missing_record(self, sqlite_db):
        with pytest.raises(RecordNotFoundError):
            await db_client.update_record(collection="employees", record_id="42", data={"status": "active"})

    async def test_invalid_collection_name(self, sqlite_db):
        with pytest.raises(ValueError, match="Invalid collection name"):
            await db_client.list_records(collection="employees; DROP TABLE employees")

    async def test_json_columns_round_trip(self, sqlite_db):
        tasks = [{"name": "exit_interview", "completed": False, "category": "documentation"}]
        created = await db_client.create_record(
            collection="offboarding",
            data={
                "employee_id": "1",
                "status": "pending_exit",
                "tasks": tasks,
                "type": "retirement",
                "reason": "Retiring",
                "initiated_at": "2024-02-20T09:30:00",
                "target_exit_date": "2024-03-15",
                "last_error": {"step": "payroll removal", "message": "timeout"},
            },
        )

        assert created["tasks"] == tasks
        assert created["last_error"]["step"] == "payroll removal"
        assert created["completed_steps"] == []
        assert created["documents"] == []


class TestListRecords:
    @pytest.fixture
    async def employees(self, sqlite_db):
        await db_client.create_record(collection="employees", data=_employee("EMP-1", "Chidi"))
        await db_client.create_record(collection="employees", data=_employee("EMP-2", "Amina", department="Sales"))
        await db_client.create_record(collection="employees", data=_employee("EMP-3", "Ben"))

    async def test_equality_filter(self, employees):
        records = await db_client.list_records(collection="employees", filter_query='department = "Finance"')

        assert [r["first_name"] for r in records] == ["Chidi", "Ben"]

    async def test_combined_filters(self, employees):
        records = await db_client.list_records(
            collection="employees", filter_query='department != "Sales" && first_name ~ "en"'
        )

        assert [r["first_name"] for r in records] == ["Ben"]

    async def test_sort_descending(self, employees):
        records = await db_client.list_records(collection="employees", sort="-first_name")

        assert [r["first_name"] for r in records] == ["Chidi", "Ben", "Amina"]

    async def test_pagination(self, employees):
        first_page = await db_client.list_records(collection="employees", per_page=2)
        second_page = await db_client.list_records(collection="employees", page=2, per_page=2)

        assert len(first_page) == 2
        assert [r["first_name"] for r in second_page] == ["Ben"]

    async def test_get_first_record(self, employees):
        record = await db_client.get_first_record(collection="employees", filter_query='employee_code = "EMP-2"')
        missing = await db_client.get_first_record(collection="employees", filter_query='employee_code = "EMP-9"')

        assert record["first_name"] == "Amina"
        assert missing is None

    async def test_invalid_filter(self, employees):
        with pytest.raises(ValueError, match="Invalid filter syntax"):
            await db_client.list_records(collection="employees", filter_query="department Finance")


def test_sanitize_param_escapes_quotes():
    assert db_client.sanitize_param('Ops "North"') == 'Ops \\"North\\"'
