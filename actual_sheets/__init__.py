"""Sync Actual Budget balances and monthly category data into Google Sheets."""

__version__ = "0.3.0"
