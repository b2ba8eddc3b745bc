"""Configuration management for the weekly report.

Settings are read from a JSON file with camelCase keys.  Two environment
variables override the file:

* ``YNAB_REPORT_CONFIG`` - default location of the config file
* ``YNAB_PERSONAL_ACCESS_TOKEN`` - YNAB token, so it need not be stored on disk
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

CONFIG_ENV_VAR = "YNAB_REPORT_CONFIG"
TOKEN_ENV_VAR = "YNAB_PERSONAL_ACCESS_TOKEN"
DEFAULT_CONFIG_FILE = "config.json"

TABLE_PRINT = "table_print"
CSV_PRINT = "csv_print"
SIMPLE_OUTPUT_FORMATS = {TABLE_PRINT, CSV_PRINT}
# older config files spell the table output "polars_print"
OUTPUT_FORMAT_ALIASES = {"polars_print": TABLE_PRINT}


def default_config_path() -> Path:
    """``$YNAB_REPORT_CONFIG`` if set, else ``config.json`` in the working directory."""
    return Path(os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE)


class ConfigError(ValueError):
    """Raised when the configuration file is invalid."""


@dataclass(frozen=True)
class OutputFormat:
    """Where the report goes.

    ``kind`` is one of ``table_print``, ``csv_print``, ``csv_file`` or
    ``visual_file``; the file kinds carry a ``path``.
    """

    kind: str = TABLE_PRINT
    path: Optional[Path] = None


@dataclass(frozen=True)
class Config:
    budget_name: str
    personal_access_token: str
    category_group_watch_list: Dict[str, str]
    resolution_date: Optional[date] = None
    show_all_rows: bool = False
    output_format: OutputFormat = field(default_factory=OutputFormat)
    include_chart: bool = False


def _parse_output_format(value: Any) -> OutputFormat:
    if value is None:
        return OutputFormat()
    if isinstance(value, str):
        kind = OUTPUT_FORMAT_ALIASES.get(value, value)
        if kind not in SIMPLE_OUTPUT_FORMATS:
            raise ConfigError(
                f"Unknown outputFormat '{value}'. Expected one of {sorted(SIMPLE_OUTPUT_FORMATS)} "
                "or an object with csvOutput/visualOutput."
            )
        return OutputFormat(kind=kind)
    if isinstance(value, dict):
        for key in ("csvOutput", "csv_output"):
            if key in value:
                return OutputFormat(kind="csv_file", path=Path(value[key]))
        for key in ("visualOutput", "visual_output"):
            if key in value:
                return OutputFormat(kind="visual_file", path=Path(value[key]))
    raise ConfigError(f"Invalid outputFormat: {value!r}")


def _parse_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ConfigError(f"resolutionDate must be YYYY-MM-DD, got {value!r}") from exc


def parse_config(data: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build a :class:`Config` from decoded JSON.

    Args:
        data: Decoded config file contents
        environ: Environment to read overrides from (defaults to ``os.environ``)

    Raises:
        ConfigError: If a required key is missing or has the wrong type
    """
    env = os.environ if environ is None else environ
    if not isinstance(data, Mapping):
        raise ConfigError("Config file must contain a JSON object")

    budget_name = data.get("budgetName")
    if not isinstance(budget_name, str) or not budget_name:
        raise ConfigError("budgetName is required")

    token = env.get(TOKEN_ENV_VAR) or data.get("personalAccessToken")
    if not isinstance(token, str) or not token:
        raise ConfigError(f"personalAccessToken is required (or set {TOKEN_ENV_VAR})")

    watch_list = data.get("categoryGroupWatchList")
    if not isinstance(watch_list, Mapping):
        raise ConfigError("categoryGroupWatchList must be an object of group name to colour")

    show_all_rows = data.get("showAllRows", False)
    if not isinstance(show_all_rows, bool):
        raise ConfigError("showAllRows must be true or false")

    include_chart = data.get("includeChart", False)
    if not isinstance(include_chart, bool):
        raise ConfigError("includeChart must be true or false")

    return Config(
        budget_name=budget_name,
        personal_access_token=token,
        category_group_watch_list={str(k): str(v) for k, v in watch_list.items()},
        resolution_date=_parse_date(data.get("resolutionDate")),
        show_all_rows=show_all_rows,
        output_format=_parse_output_format(data.get("outputFormat")),
        include_chart=include_chart,
    )


def load_config(path: Path | str | None = None) -> Config:
    """Load and validate the config file.

    Raises:
        FileNotFoundError: If the configuration file doesn't exist
        ConfigError: If the file is not valid JSON or fails validation

    Example:
        >>> cfg = load_config('config.json')
        >>> cfg.output_format.kind
        'table_print'
    """
    config_path = Path(path) if path is not None else default_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"parsing config JSON from {config_path}: {exc}") from exc
    return parse_config(data)
