"""Shared fakes for the budget backend and the Sheets client.

Nothing here talks to the network: ``FakeBudget`` stands in for
``BudgetClient`` and ``FakeGspreadClient`` for ``gspread.Client``.
"""

from __future__ import annotations

import gspread
import pytest

from actual_sheets.aggregate import (
    Account,
    Category,
    CategoryGroup,
    Transaction,
)
from actual_sheets.config import Config


class FakeWorksheet:
    def __init__(self, title):
        self.title = title


class FakeSpreadsheet:
    def __init__(self, titles=(), fail_on=(), values=None):
        self._worksheets = [FakeWorksheet(t) for t in titles]
        self.fail_on = set(fail_on)
        self.values = dict(values or {})
        self.added = []
        self.updates = []

    def worksheets(self):
        return list(self._worksheets)

    def add_worksheet(self, title, rows, cols):
        self.added.append(title)
        ws = FakeWorksheet(title)
        self._worksheets.append(ws)
        return ws

    def values_get(self, range_spec):
        rows = self.values.get(range_spec)
        return {"range": range_spec, "values": rows} if rows else {"range": range_spec}

    def values_update(self, range_spec, params=None, body=None):
        if range_spec in self.fail_on:
            raise gspread.exceptions.GSpreadException(f"cannot write {range_spec}")
        self.updates.append((range_spec, params, body))
        self.values[range_spec] = body["values"]


class FakeGspreadClient:
    def __init__(self, spreadsheet):
        self.spreadsheet = spreadsheet
        self.opened = []

    def open_by_key(self, key):
        self.opened.append(key)
        return self.spreadsheet


class FakeBudget:
    """Records calls the way the orchestrator makes them."""

    def __init__(self, accounts=None, transactions=None, categories=None, groups=None,
                 months=None, fail=None):
        self.accounts = accounts if accounts is not None else [
            Account("a1", "Savings"),
            Account("a2", "Checking"),
            Account("a3", "Old Card", closed=True),
        ]
        self.transactions = transactions if transactions is not None else {
            "a1": [Transaction("t1", "a1", 10000)],
            "a2": [Transaction("t2", "a2", 250), Transaction("t3", "a2", -100)],
            "a3": [Transaction("t4", "a3", 999)],
        }
        self.categories = categories if categories is not None else [
            Category("c1", "Food", "g1"),
            Category("c2", "Rent", "g1"),
        ]
        self.groups = groups if groups is not None else [CategoryGroup("g1", "Living")]
        self.months = months if months is not None else {}
        self.fail = fail or {}
        self.calls = []
        self.shutdown_count = 0

    def _maybe_fail(self, name):
        self.calls.append(name)
        if name in self.fail:
            raise self.fail[name]

    def init_session(self, server_url, password, cert=False):
        self._maybe_fail("init_session")
        return self

    def download_budget(self, budget_id, password=None):
        self._maybe_fail("download_budget")

    def sync(self):
        self._maybe_fail("sync")

    def list_accounts(self):
        self._maybe_fail("list_accounts")
        return list(self.accounts)

    def list_transactions(self, account_id):
        self.calls.append(f"list_transactions:{account_id}")
        return self.transactions.get(account_id)

    def list_categories(self):
        self._maybe_fail("list_categories")
        return list(self.categories)

    def list_category_groups(self):
        self._maybe_fail("list_category_groups")
        return list(self.groups)

    def get_month(self, month_key):
        self._maybe_fail(f"get_month:{month_key}")
        return self.months.get(month_key, {})

    def shutdown(self):
        self.shutdown_count += 1

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.shutdown()
        return False


class FakeSheets:
    """Module-shaped stand-in for ``actual_sheets.sheets``."""

    def __init__(self, fail_ranges=(), auth_error=None, ensure_error=None):
        self.fail_ranges = set(fail_ranges)
        self.auth_error = auth_error
        self.ensure_error = ensure_error
        self.ensured = []
        self.writes = []
        self.gc = object()

    def authorize(self, credentials_path, scopes=None):
        if self.auth_error:
            raise self.auth_error
        return self.gc

    @staticmethod
    def sheet_title(range_spec):
        from actual_sheets.sheets import sheet_title
        return sheet_title(range_spec)

    def ensure_sheet_exists(self, gc, spreadsheet_id, title):
        if self.ensure_error:
            raise self.ensure_error
        self.ensured.append(title)
        return False

    def update_range(self, gc, spreadsheet_id, range_spec, rows, clear=True):
        self.writes.append((range_spec, [list(r) for r in rows]))
        return range_spec not in self.fail_ranges


@pytest.fixture
def config():
    return Config(
        credentials_path="/tmp/creds.json",
        server_url="http://actual.local:5006",
        server_password="secret",
        spreadsheet_id="sheet-123",
        balances_range="Balances!A2:B",
        prior_month_range="'Prior Month'!A2:E",
        current_month_range="Current!A2:E",
        budget_id="budget-sync-id",
    )

