import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError

# ---- Environment keys ----
REQUIRED_ENV_VARS = (
    "GOOGLE_APPLICATION_CREDENTIALS",
    "ACTUAL_SERVER_URL",
    "ACTUAL_SERVER_PASSWORD",
    "SPREADSHEET_ID",
    "ACCOUNTS_BALANCES_RANGE",
    "PRIOR_MONTH_RANGE",
    "CURRENT_MONTH_RANGE",
    "ACTUAL_BUDGET_ID",
)
BUDGET_PASSWORD_VAR = "ACTUAL_BUDGET_PASSWORD"  # optional, for end-to-end encrypted budgets
CERT_VAR = "ACTUAL_CERT"                        # optional, path to a CA bundle or "false"
# --------------------------


@dataclass(frozen=True)
class Config:
    credentials_path: str
    server_url: str
    server_password: str
    spreadsheet_id: str
    balances_range: str
    prior_month_range: str
    current_month_range: str
    budget_id: str
    budget_password: Optional[str] = None
    cert: object = True

    @property
    def ranges(self) -> list[tuple[str, str]]:
        """(label, range) pairs in the order they are written."""
        return [
            ("account balances", self.balances_range),
            ("prior month categories", self.prior_month_range),
            ("current month categories", self.current_month_range),
        ]


def _parse_cert(value: Optional[str]):
    if not value or not value.strip():
        return True
    if value.strip().lower() in ("0", "false", "no", "off"):
        return False
    if value.strip().lower() in ("1", "true", "yes", "on"):
        return True
    return value


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Optional[str]]] = None,
    env_file: Optional[str] = None,
) -> Config:
    """
    Build the run configuration.

    When ``environ`` is None the process environment is used, after loading a
    ``.env`` file (``env_file`` or the nearest one found). Values already set in
    the environment are never replaced by the file. ``overrides`` maps env keys
    to values from the command line; a None value means "not given".

    Raises ConfigError naming every missing key.
    """
    if environ is None:
        load_dotenv(env_file or find_dotenv(usecwd=True), override=False)
        environ = os.environ

    values = {k: environ.get(k) for k in REQUIRED_ENV_VARS}
    for key, val in (overrides or {}).items():
        if val:
            values[key] = val

    missing = [k for k in REQUIRED_ENV_VARS if not values.get(k)]
    if missing:
        raise ConfigError(missing)

    return Config(
        credentials_path=values["GOOGLE_APPLICATION_CREDENTIALS"],
        server_url=values["ACTUAL_SERVER_URL"],
        server_password=values["ACTUAL_SERVER_PASSWORD"],
        spreadsheet_id=values["SPREADSHEET_ID"],
        balances_range=values["ACCOUNTS_BALANCES_RANGE"],
        prior_month_range=values["PRIOR_MONTH_RANGE"],
        current_month_range=values["CURRENT_MONTH_RANGE"],
        budget_id=values["ACTUAL_BUDGET_ID"],
        budget_password=environ.get(BUDGET_PASSWORD_VAR) or None,
        cert=_parse_cert(environ.get(CERT_VAR)),
    )
