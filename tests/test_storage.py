"""
Tests for profile storage.

The Sheets backend runs against a fake worksheet that behaves like gspread's
for the calls the backend makes; no network access.
"""

import asyncio
import pytest
from decimal import Decimal

from wealthai.services.storage import (
    GoogleSheetsProfileStorage,
    ImmutableFieldError,
    InMemoryProfileStorage,
    MalformedProfileError,
    NotFoundError,
    StorageError,
)
from wealthai.services.storage.google_sheets import PROFILE_COLUMNS

from conftest import USER_ID, profile_document


class FakeWorksheet:
    """Rows of strings; 1-based row numbers like gspread."""

    def __init__(self, rows=None):
        self.rows = [list(PROFILE_COLUMNS)] + [list(r) for r in (rows or [])]
        self.appends = 0
        self.updates = 0

    def get_all_values(self):
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self.appends += 1
        self.rows.append(list(row))

    def update(self, range_name=None, values=None, value_input_option=None):
        self.updates += 1
        row_number = int(range_name[1:])
        self.rows[row_number - 1] = list(values[0])


class FakeSheetsClient:
    def __init__(self, sheet=None, error=None):
        self.sheet = sheet or FakeWorksheet()
        self.error = error

    def get_profiles_sheet(self):
        if self.error:
            raise self.error
        return self.sheet


def sheet_row(user_id, document):
    return [user_id] + [str(document.get(key, "")) for key in PROFILE_COLUMNS[1:]]


@pytest.fixture(params=["memory", "sheets"])
def backend(request):
    """Each contract test runs against both backends."""
    if request.param == "memory":
        return InMemoryProfileStorage()
    return GoogleSheetsProfileStorage(FakeSheetsClient())


class TestStorageContract:
    """Behaviour shared by every backend."""

    def test_read_missing_returns_none(self, backend):
        assert asyncio.run(backend.read("nobody")) is None

    def test_create_then_read(self, backend):
        asyncio.run(backend.create_or_merge(USER_ID, {
            "name": "Asha",
            "email": "asha@example.com",
            "income": Decimal("50000"),
            "expenses": Decimal("30000"),
            "emi": Decimal("0"),
        }))
        profile = asyncio.run(backend.read(USER_ID))
        assert profile.name == "Asha"
        assert profile.income == Decimal("50000")
        assert profile.short_term_goals == ""
        assert profile.updated_at is not None

    def test_merge_leaves_other_fields(self, backend):
        asyncio.run(backend.create_or_merge(USER_ID, {
            "name": "Asha", "income": 50000, "expenses": 30000, "emi": 0,
            "longTermGoals": "House",
        }))
        asyncio.run(backend.create_or_merge(USER_ID, {"name": "Asha K"}))
        profile = asyncio.run(backend.read(USER_ID))
        assert profile.name == "Asha K"
        assert profile.long_term_goals == "House"

    def test_update_missing_raises_not_found(self, backend):
        with pytest.raises(NotFoundError):
            asyncio.run(backend.update("nobody", {"name": "X"}))

    def test_update_rejects_immutable_fields(self, backend):
        asyncio.run(backend.create_or_merge(USER_ID, {
            "name": "Asha", "email": "a@x.com", "income": 1, "expenses": 0, "emi": 0,
        }))
        with pytest.raises(ImmutableFieldError):
            asyncio.run(backend.update(USER_ID, {"email": "b@x.com"}))

    def test_unknown_fields_rejected(self, backend):
        with pytest.raises(StorageError):
            asyncio.run(backend.create_or_merge(USER_ID, {"salary": 1}))

    def test_malformed_document(self, backend):
        asyncio.run(backend.create_or_merge(USER_ID, {"name": "Asha", "income": "lots"}))
        with pytest.raises(MalformedProfileError):
            asyncio.run(backend.read(USER_ID))


class TestInMemoryStorage:
    """In-memory specifics."""

    def test_seeded_documents_are_copied(self):
        seed = {USER_ID: profile_document()}
        store = InMemoryProfileStorage(seed)
        seed[USER_ID]["name"] = "Changed"
        assert asyncio.run(store.read(USER_ID)).name == "Asha"

    def test_write_count(self, store):
        asyncio.run(store.update(USER_ID, {"income": Decimal("60000")}))
        assert store.write_count == 1
        assert store.raw_document(USER_ID)["income"] == Decimal("60000")


class TestGoogleSheetsStorage:
    """Sheets row layout and error wrapping."""

    def test_new_profile_is_appended(self):
        client = FakeSheetsClient()
        storage = GoogleSheetsProfileStorage(client)
        asyncio.run(storage.create_or_merge(USER_ID, {"name": "Asha", "income": Decimal("50000")}))
        assert client.sheet.appends == 1
        row = client.sheet.rows[1]
        assert row[0] == USER_ID
        assert row[PROFILE_COLUMNS.index("income")] == "50000"

    def test_existing_row_is_updated_in_place(self):
        sheet = FakeWorksheet([
            sheet_row("someone-else", profile_document(name="Ravi")),
            sheet_row(USER_ID, profile_document()),
        ])
        storage = GoogleSheetsProfileStorage(FakeSheetsClient(sheet))
        asyncio.run(storage.update(USER_ID, {"emi": Decimal("5000")}))
        assert sheet.updates == 1
        assert sheet.appends == 0
        assert len(sheet.rows) == 3
        assert asyncio.run(storage.read(USER_ID)).emi == Decimal("5000")
        assert asyncio.run(storage.read("someone-else")).name == "Ravi"

    def test_blank_cells_read_as_missing(self):
        sheet = FakeWorksheet([sheet_row(USER_ID, profile_document(shortTermGoals=""))])
        storage = GoogleSheetsProfileStorage(FakeSheetsClient(sheet))
        assert asyncio.run(storage.read(USER_ID)).short_term_goals == ""

    def test_backend_errors_become_storage_errors(self):
        storage = GoogleSheetsProfileStorage(FakeSheetsClient(error=RuntimeError("quota")))
        with pytest.raises(StorageError, match="quota"):
            asyncio.run(storage.read(USER_ID))
        with pytest.raises(StorageError):
            asyncio.run(storage.create_or_merge(USER_ID, {"name": "Asha"}))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
