import argparse
import locale
import sys
from datetime import datetime, timezone
from typing import Optional

from . import sheets as sheets_module
from .aggregate import compute_balances, join_category_month, month_keys
from .budget import BudgetClient
from .config import Config, load_config
from .errors import ConfigError, FatalError

EXIT_OK = 0
EXIT_FATAL = 1


def _month_rows(budget: BudgetClient, month_key: str) -> list[list]:
    """Joined category rows for one month, or [] if any fetch for it fails."""
    print(f"Fetching data for month: {month_key}...")
    try:
        month = budget.get_month(month_key)
        categories = budget.list_categories()
        groups = budget.list_category_groups()
    except Exception as e:
        print(f"❌ Error fetching month data for {month_key}: {e}", file=sys.stderr)
        return []
    return [row.as_row() for row in join_category_month(categories, groups, month)]


def _write_ranges(gc, config: Config, payloads: list[tuple[str, list]], sheets) -> int:
    """Write each range independently; returns how many writes failed."""
    failed = 0
    for range_spec, rows in payloads:
        title = sheets.sheet_title(range_spec)
        if title:
            sheets.ensure_sheet_exists(gc, config.spreadsheet_id, title)
        if not sheets.update_range(gc, config.spreadsheet_id, range_spec, rows):
            failed += 1
    return failed


def run(config: Config, budget_factory=BudgetClient, sheets=sheets_module,
        now: Optional[datetime] = None) -> int:
    """
    Run one full sync and return the process exit status.

    Fatal errors (login, download, Google auth, sheet creation) return 1. Any
    other failure is printed and the run still ends with 0 once the budget
    session has been shut down.
    """
    now = now or datetime.now(timezone.utc)
    budget = budget_factory()
    try:
        budget.init_session(config.server_url, config.server_password, cert=config.cert)
        budget.download_budget(config.budget_id, config.budget_password)
        budget.sync()

        accounts = budget.list_accounts()
        balances = compute_balances(accounts, budget.list_transactions)
        print(f"✅ Computed balances for {len(balances)} of {len(accounts)} accounts.")

        prior_key, current_key = month_keys(now)
        prior_rows = _month_rows(budget, prior_key)
        current_rows = _month_rows(budget, current_key)

        gc = sheets.authorize(config.credentials_path)
        failed = _write_ranges(gc, config, [
            (config.balances_range, [b.as_row() for b in balances]),
            (config.prior_month_range, prior_rows),
            (config.current_month_range, current_rows),
        ], sheets)
        if failed:
            print(f"⚠️  Data sync completed with {failed} failed range update(s).")
        else:
            print("✅ Data sync completed.")
        return EXIT_OK
    except FatalError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return EXIT_FATAL
    except Exception as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return EXIT_OK
    finally:
        budget.shutdown()


def parse_arguments(argv=None):
    """Parse command line arguments to override environment configuration."""
    parser = argparse.ArgumentParser(description="Actual Budget to Google Sheets sync")

    parser.add_argument("--env-file", type=str, metavar="PATH",
                        help="Load settings from this .env file (default: nearest .env)")
    parser.add_argument("--spreadsheet-id", type=str,
                        help="Google Sheets spreadsheet ID (overrides SPREADSHEET_ID)")
    parser.add_argument("--budget-id", type=str,
                        help="Actual budget sync ID (overrides ACTUAL_BUDGET_ID)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--clear", action="store_true",
                      help="Clear the three target ranges and exit")
    mode.add_argument("--check", action="store_true",
                      help="Verify access to the Actual server and the spreadsheet, then exit")

    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_arguments(argv)
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        pass  # fall back to the C locale's ordering

    try:
        config = load_config(
            overrides={"SPREADSHEET_ID": args.spreadsheet_id, "ACTUAL_BUDGET_ID": args.budget_id},
            env_file=args.env_file,
        )
    except ConfigError as e:
        for name in e.missing:
            print(f"❌ Error: Environment variable {name} is not defined.", file=sys.stderr)
        return EXIT_FATAL

    if args.clear:
        from .reset import clear_ranges
        return clear_ranges(config)
    if args.check:
        from .check import check_access
        return check_access(config)
    return run(config)


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
