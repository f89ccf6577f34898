"""
Connectivity check: log in to the Actual server, confirm the budget is listed,
and open the spreadsheet with the service account. Nothing is written.
"""
import sys

import gspread

from . import sheets as sheets_module
from .budget import BudgetClient
from .config import Config
from .errors import FatalError

EXIT_OK = 0
EXIT_FATAL = 1


def check_access(config: Config, budget_factory=BudgetClient, sheets=sheets_module) -> int:
    print("🔍 Testing Actual and Google Sheets access...")
    ok = True

    with budget_factory() as budget:
        try:
            budget.init_session(config.server_url, config.server_password, cert=config.cert)
            print(f"✅ Login to {config.server_url} successful.")
            budget.download_budget(config.budget_id, config.budget_password)
            print(f'✅ Budget "{config.budget_id}" opened.')
        except FatalError as e:
            print(f"❌ Error: {e}", file=sys.stderr)
            ok = False

    try:
        gc = sheets.authorize(config.credentials_path)
        sh = gc.open_by_key(config.spreadsheet_id)
        titles = [ws.title for ws in sh.worksheets()]
        print(f"✅ Spreadsheet {config.spreadsheet_id} has sheets: {', '.join(titles)}")
        for label, range_spec in config.ranges:
            title = sheets.sheet_title(range_spec)
            if title and title not in titles:
                print(f'💡 Sheet "{title}" for {label} does not exist yet; the sync will create it.')
    except (FatalError, gspread.exceptions.GSpreadException, OSError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        ok = False

    return EXIT_OK if ok else EXIT_FATAL
