import re
import sys
from typing import Any, Optional, Sequence

import gspread
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials

from .errors import SheetError, SheetsAuthError

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
]

NEW_SHEET_ROWS = 1000
NEW_SHEET_COLS = 26

# 'Sheet Name'!A1:B2  or  Sheet1!A1:B2
_RANGE_RE = re.compile(r"^(?:'((?:[^']|'')+)'|([^!]+))!")


def sheet_title(range_spec: str) -> Optional[str]:
    """Sheet title referenced by an A1 range, or None when the range has no sheet part."""
    m = _RANGE_RE.match(range_spec or "")
    if not m:
        return None
    if m.group(1) is not None:
        return m.group(1).replace("''", "'")
    return m.group(2)


def authorize(credentials_path: str, scopes: Sequence[str] = SCOPES) -> gspread.Client:
    print("🔐 Authorizing Google API...")
    try:
        creds = Credentials.from_service_account_file(str(credentials_path), scopes=list(scopes))
        return gspread.authorize(creds)
    except (OSError, ValueError, GoogleAuthError) as e:
        raise SheetsAuthError(f"Error authorizing Google API: {e}") from e


def ensure_sheet_exists(gc: gspread.Client, spreadsheet_id: str, title: str) -> bool:
    """
    Create worksheet ``title`` if the spreadsheet does not have it yet.

    Returns True when a sheet was created. Any API failure raises SheetError,
    since writing into a missing sheet would fail anyway.
    """
    print(f'Checking if sheet "{title}" exists...')
    try:
        sh = gc.open_by_key(spreadsheet_id)
        titles = [ws.title for ws in sh.worksheets()]
        if title in titles:
            print(f'Sheet "{title}" already exists.')
            return False
        print(f'➕ Sheet "{title}" not found, creating...')
        sh.add_worksheet(title=title, rows=NEW_SHEET_ROWS, cols=NEW_SHEET_COLS)
        return True
    except (gspread.exceptions.GSpreadException, GoogleAuthError, OSError) as e:
        raise SheetError(f'Error ensuring sheet "{title}" exists: {e}') from e


def _blank_padded(values: list[list[Any]], existing: list[list[Any]]) -> list[list[Any]]:
    """Pad ``values`` with empty cells so it covers every cell in ``existing``."""
    width = max((len(r) for r in values + existing), default=0)
    height = max(len(values), len(existing))
    padded = [r + [""] * (width - len(r)) for r in values]
    padded.extend([""] * width for _ in range(height - len(values)))
    return padded


def update_range(
    gc: gspread.Client,
    spreadsheet_id: str,
    range_spec: str,
    rows: Sequence[Sequence[Any]],
    clear: bool = True,
) -> bool:
    """
    Overwrite ``range_spec`` with ``rows`` as if typed by a user (USER_ENTERED).

    With ``clear`` the current contents are read first and the new rows are
    padded with blanks over them, so shorter output leaves no stale cells and
    the range is replaced in a single write. If that write fails the old
    values stay in place. Failures are printed and reported by returning False.
    """
    print(f'Updating sheet with range "{range_spec}"...')
    values = [list(r) for r in rows]
    try:
        sh = gc.open_by_key(spreadsheet_id)
        body = values
        if clear:
            existing = sh.values_get(range_spec).get("values", [])
            body = _blank_padded(values, existing)
        sh.values_update(
            range_spec,
            params={"valueInputOption": "USER_ENTERED"},
            body={"values": body},
        )
    except (gspread.exceptions.GSpreadException, GoogleAuthError, OSError) as e:
        print(f'❌ Error updating sheet with range "{range_spec}": {e}', file=sys.stderr)
        return False
    print(f'✅ Sheet "{range_spec}" updated successfully ({len(values)} rows).')
    return True
