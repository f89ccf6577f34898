"""
Clear the three sync ranges
===========================
Blanks the balances, prior-month and current-month ranges so the next sync
starts from an empty sheet.

Run this when you want to:
- Check that a fresh sync fills every range
- Remove rows written under an older range layout
"""
import sys

from . import sheets as sheets_module
from .config import Config
from .errors import FatalError

EXIT_OK = 0
EXIT_FATAL = 1


def clear_ranges(config: Config, sheets=sheets_module) -> int:
    """Clear each configured range; returns the process exit status."""
    print("🧹 Starting clear of sync ranges...")
    try:
        gc = sheets.authorize(config.credentials_path)
    except FatalError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return EXIT_FATAL

    failed = 0
    for label, range_spec in config.ranges:
        print(f'📋 Clearing {label} range "{range_spec}"...')
        if not sheets.update_range(gc, config.spreadsheet_id, range_spec, [], clear=True):
            failed += 1

    if failed:
        print(f"⚠️  Clear finished with {failed} failed range(s).")
    else:
        print("🎉 All ranges cleared. Run the sync again to reload them.")
    return EXIT_OK
