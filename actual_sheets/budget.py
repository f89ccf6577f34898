"""
Thin adapter over the Actual Budget client (actualpy).

Only the calls this sync needs are exposed, each returning the plain
dataclasses from ``aggregate`` so nothing downstream touches SQLAlchemy rows.
"""
import contextlib
import sys
from decimal import Decimal
from typing import Optional

import httpx
from actual import Actual
from actual.budgets import get_budget_history
from actual.exceptions import ActualError
from actual.queries import (
    get_accounts,
    get_categories,
    get_category_groups,
    get_transactions,
)

from .aggregate import (
    Account,
    Category,
    CategoryGroup,
    CategoryMonthEntry,
    MonthSummary,
    Transaction,
    month_bounds,
)
from .errors import BudgetAuthError, BudgetDownloadError


def _get_field(obj, *keys, default=None):
    for key in keys:
        val = getattr(obj, key, None)
        if val is not None:
            return val
    return default


def _to_cents(amount) -> int:
    return int((Decimal(amount or 0) * 100).to_integral_value())


class BudgetClient:
    """
    Owns one Actual session for the lifetime of a run.

    Use as a context manager; leaving the block calls ``shutdown()``, which
    releases the session once no matter how many times it is called.
    """

    def __init__(self):
        self._stack = contextlib.ExitStack()
        self._actual: Optional[Actual] = None
        self._accounts: dict[str, object] = {}
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False

    @property
    def session(self):
        if self._actual is None:
            raise BudgetDownloadError("No budget session; call init_session and download_budget first.")
        return self._actual.session

    def init_session(self, server_url: str, password: str, cert=True) -> "BudgetClient":
        print("🔐 Initializing Actual API...")
        try:
            actual = Actual(base_url=server_url, password=password, cert=cert)
        except (ActualError, httpx.HTTPError) as e:
            raise BudgetAuthError(f"Could not log in to {server_url}: {e}") from e
        self._actual = self._stack.enter_context(actual)
        return self

    def _find_remote_file(self, budget_id: str):
        files = self._actual.list_user_files().data
        for f in files:
            if getattr(f, "deleted", 0):
                continue
            if budget_id in (f.group_id, f.file_id, f.name):
                return f
        return None

    def download_budget(self, budget_id: str, password: Optional[str] = None):
        print("📥 Downloading budget data...")
        if self._actual is None:
            raise BudgetDownloadError("Session not initialized.")
        try:
            remote = self._find_remote_file(budget_id)
            if remote is None:
                raise BudgetDownloadError(f'Budget "{budget_id}" not found on the server.')
            self._actual.set_file(remote)
            self._actual.download_budget(password)
            session = self._actual.session
        except (ActualError, httpx.HTTPError) as e:
            raise BudgetDownloadError(
                f"Failed to download budget data or invalid data received: {e}") from e
        if session is None:
            raise BudgetDownloadError("Failed to download budget data or invalid data received.")
        return remote

    def sync(self) -> None:
        print("🔄 Synchronizing data...")
        self._actual.sync()

    def list_accounts(self) -> list[Account]:
        print("📋 Fetching accounts...")
        rows = get_accounts(self.session)
        self._accounts = {r.id: r for r in rows}
        return [Account(id=r.id, name=r.name or "", closed=bool(r.closed)) for r in rows]

    def list_transactions(self, account_id: str) -> Optional[list[Transaction]]:
        """Transactions for one account, or None if the backend gave no usable result."""
        account = self._accounts.get(account_id, account_id)
        try:
            rows = get_transactions(self.session, account=account)
        except ActualError as e:
            print(f"❌ Error fetching transactions for account {account_id}: {e}", file=sys.stderr)
            return None
        if rows is None:
            return None
        return [
            Transaction(id=t.id, account_id=_get_field(t, "acct", "account_id", default=account_id),
                        amount=int(t.amount or 0))
            for t in rows
        ]

    def list_categories(self) -> list[Category]:
        return [
            Category(id=c.id, name=c.name or "", group_id=_get_field(c, "cat_group", "group_id"))
            for c in get_categories(self.session)
        ]

    def list_category_groups(self) -> list[CategoryGroup]:
        return [CategoryGroup(id=g.id, name=g.name or "") for g in get_category_groups(self.session)]

    def get_month(self, month_key: str) -> MonthSummary:
        """
        Per-category budgeted/activity/balance for ``month_key`` (``YYYY-MM``).

        Values come from actualpy's budget history, so ``balance`` is the
        accumulated balance Actual shows, carryover from earlier months
        included. Amounts are converted to integer cents.
        """
        start, _ = month_bounds(month_key)
        history = get_budget_history(self.session, start)
        if not history or history[-1].month != start:
            return {}
        return {
            c.id: CategoryMonthEntry(
                budgeted=_to_cents(c.budgeted),
                activity=_to_cents(c.spent),
                balance=_to_cents(c.accumulated_balance),
            )
            for c in history[-1].categories
        }

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        print("Shutting down Actual API...")
        self._stack.close()
