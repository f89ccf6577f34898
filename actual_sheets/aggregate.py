import locale
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Mapping, Optional, Sequence


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    closed: bool = False


@dataclass(frozen=True)
class Transaction:
    id: str
    account_id: str
    amount: int  # cents


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    group_id: Optional[str]


@dataclass(frozen=True)
class CategoryGroup:
    id: str
    name: str


@dataclass(frozen=True)
class CategoryMonthEntry:
    budgeted: int = 0
    activity: int = 0
    balance: int = 0


# category id -> entry for one month
MonthSummary = Mapping[str, CategoryMonthEntry]


@dataclass(frozen=True)
class AccountBalance:
    name: str
    balance: float

    def as_row(self) -> list:
        return [self.name, self.balance]


@dataclass(frozen=True)
class CategoryMonthRow:
    group_name: str
    category_name: str
    budgeted: int
    activity: int
    balance: int

    def as_row(self) -> list:
        return [self.group_name, self.category_name, self.budgeted, self.activity, self.balance]


def _collation_key(name: str) -> tuple[str, str]:
    # Casefolded first: the C locale orders by code point.
    try:
        return locale.strxfrm(name.casefold()), locale.strxfrm(name)
    except (ValueError, locale.Error):
        return name.casefold(), name


def compute_balances(
    accounts: Iterable[Account],
    fetch_transactions: Callable[[str], Optional[Sequence[Transaction]]],
) -> list[AccountBalance]:
    """
    Sum each open account's transactions into a balance in major units.

    ``fetch_transactions`` is called once per open account. A None result, or an
    exception raised by that one call, skips the account; the rest still
    contribute. Output is ordered by account name using the current locale's
    collation.
    """
    results: list[Optional[AccountBalance]] = []
    for account in accounts:
        if account.closed:
            continue
        results.append(_account_balance(account, fetch_transactions))

    balances = [b for b in results if b is not None]
    return sorted(balances, key=lambda b: _collation_key(b.name))


def _account_balance(account: Account, fetch_transactions) -> Optional[AccountBalance]:
    try:
        transactions = fetch_transactions(account.id)
    except Exception as e:
        print(f"❌ Error fetching transactions for account {account.name}: {e}", file=sys.stderr)
        return None
    if transactions is None or not isinstance(transactions, (list, tuple)):
        print(f"⚠️  No valid transactions found for account {account.name}, skipping.", file=sys.stderr)
        return None
    cents = sum(t.amount for t in transactions)
    return AccountBalance(account.name, cents / 100)


def join_category_month(
    categories: Sequence[Category],
    groups: Sequence[CategoryGroup],
    month: MonthSummary,
) -> list[CategoryMonthRow]:
    """One row per category, in listing order, joined with its group and month entry."""
    group_names = {g.id: g.name for g in groups}
    rows = []
    for cat in categories:
        entry = month.get(cat.id) or CategoryMonthEntry()
        rows.append(CategoryMonthRow(
            group_name=group_names.get(cat.group_id, ""),
            category_name=cat.name,
            budgeted=entry.budgeted,
            activity=entry.activity,
            balance=entry.balance,
        ))
    return rows


def month_keys(now: Optional[datetime] = None) -> tuple[str, str]:
    """Return (prior, current) month keys as ``YYYY-MM``, evaluated in UTC."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)

    year, month = now.year, now.month
    if month == 1:
        prior_year, prior_month = year - 1, 12
    else:
        prior_year, prior_month = year, month - 1
    return f"{prior_year:04d}-{prior_month:02d}", f"{year:04d}-{month:02d}"


def month_bounds(month_key: str):
    """First day of ``month_key`` and first day of the following month, as dates."""
    start = datetime.strptime(month_key, "%Y-%m").date()
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end
