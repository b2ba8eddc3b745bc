"""Tests for config file parsing."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from ynab_report.config import (
    CONFIG_ENV_VAR,
    CSV_PRINT,
    TABLE_PRINT,
    TOKEN_ENV_VAR,
    ConfigError,
    OutputFormat,
    load_config,
    parse_config,
)


def _data(**overrides):
    data = {
        "budgetName": "Home",
        "personalAccessToken": "file-token",
        "categoryGroupWatchList": {"Essentials": "#dfe7f5", "Fun": "#f4dccb"},
    }
    data.update(overrides)
    return data


def test_minimal_config_uses_defaults() -> None:
    cfg = parse_config(_data(), environ={})
    assert cfg.budget_name == "Home"
    assert cfg.personal_access_token == "file-token"
    assert list(cfg.category_group_watch_list) == ["Essentials", "Fun"]
    assert cfg.resolution_date is None
    assert cfg.show_all_rows is False
    assert cfg.include_chart is False
    assert cfg.output_format == OutputFormat(kind=TABLE_PRINT)


def test_environment_token_overrides_file() -> None:
    cfg = parse_config(_data(), environ={TOKEN_ENV_VAR: "env-token"})
    assert cfg.personal_access_token == "env-token"

    cfg = parse_config(_data(personalAccessToken=None), environ={TOKEN_ENV_VAR: "env-token"})
    assert cfg.personal_access_token == "env-token"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("table_print", OutputFormat(kind=TABLE_PRINT)),
        ("csv_print", OutputFormat(kind=CSV_PRINT)),
        ({"csvOutput": "out/report.csv"}, OutputFormat(kind="csv_file", path=Path("out/report.csv"))),
        ({"visualOutput": "report.html"}, OutputFormat(kind="visual_file", path=Path("report.html"))),
        ("polars_print", OutputFormat(kind=TABLE_PRINT)),
        ({"csv_output": "report.csv"}, OutputFormat(kind="csv_file", path=Path("report.csv"))),
        ({"visual_output": "report.html"}, OutputFormat(kind="visual_file", path=Path("report.html"))),
    ],
)
def test_output_formats(value, expected) -> None:
    assert parse_config(_data(outputFormat=value), environ={}).output_format == expected


def test_optional_fields() -> None:
    cfg = parse_config(
        _data(resolutionDate="2024-03-13", showAllRows=True, includeChart=True),
        environ={},
    )
    assert cfg.resolution_date == date(2024, 3, 13)
    assert cfg.show_all_rows is True
    assert cfg.include_chart is True


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"budgetName": None}, "budgetName"),
        ({"budgetName": ""}, "budgetName"),
        ({"personalAccessToken": None}, "personalAccessToken"),
        ({"categoryGroupWatchList": ["Essentials"]}, "categoryGroupWatchList"),
        ({"showAllRows": "yes"}, "showAllRows"),
        ({"includeChart": 1}, "includeChart"),
        ({"resolutionDate": "13/03/2024"}, "resolutionDate"),
        ({"outputFormat": "pdf"}, "Unknown outputFormat"),
        ({"outputFormat": {"pdfOutput": "x.pdf"}}, "Invalid outputFormat"),
    ],
)
def test_invalid_configs(overrides, message) -> None:
    with pytest.raises(ConfigError, match=message):
        parse_config(_data(**overrides), environ={})


def test_config_must_be_an_object() -> None:
    with pytest.raises(ConfigError):
        parse_config([1, 2], environ={})


def test_load_config_from_file(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)
    path = tmp_path / "config.json"
    path.write_text(json.dumps(_data(outputFormat="csv_print")), encoding="utf-8")

    cfg = load_config(path)
    assert cfg.output_format.kind == CSV_PRINT
    assert load_config(str(path)) == cfg


def test_load_config_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError, match="Configuration file not found"):
        load_config(tmp_path / "missing.json")


def test_load_config_invalid_json(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="parsing config JSON"):
        load_config(path)


def test_load_config_reads_config_env_var_at_call_time(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)
    path = tmp_path / "elsewhere.json"
    path.write_text(json.dumps(_data(budgetName="From Env")), encoding="utf-8")

    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    assert load_config().budget_name == "From Env"

    monkeypatch.delenv(CONFIG_ENV_VAR)
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError, match="config.json"):
        load_config()
