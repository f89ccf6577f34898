"""Exception types raised by the sync.

Anything deriving from ``FatalError`` aborts the run with a non-zero exit
status. Recoverable problems (a single account, a single month, a single range
write) are printed where they happen and never raised this far.
"""


class SyncError(Exception):
    """Base class for all sync errors."""


class ConfigError(SyncError):
    """Raised when required settings are missing."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(
            "Missing required environment variable(s): " + ", ".join(self.missing)
        )


class FatalError(SyncError):
    """Raised for failures that make the rest of the run meaningless."""


class BudgetAuthError(FatalError):
    """The budgeting server was unreachable or rejected the password."""


class BudgetDownloadError(FatalError):
    """The budget could not be found, downloaded or opened."""


class SheetsAuthError(FatalError):
    """Google service-account credentials could not be built."""


class SheetError(FatalError):
    """Listing or creating a worksheet failed."""
