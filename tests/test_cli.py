from __future__ import annotations

import json
import logging

import pytest
from conftest import FakeFetcher, error_payload

from openfx import cli
from openfx.client import RateClient


@pytest.fixture()
def patched_client(monkeypatch: pytest.MonkeyPatch, sleeper):
    for name in ("APP_ID", "BASE", "SYMBOLS", "CACHE_URL", "THROTTLE_SECONDS", "TIMEOUT", "PROTOCOL"):
        monkeypatch.delenv(f"OPENFX_{name}", raising=False)
    fetcher = FakeFetcher()
    configs = []

    def _from_config(config, **kwargs):
        configs.append(config)
        return RateClient(
            config.app_id,
            base=config.base,
            symbols=config.symbols,
            fetcher=fetcher,
            throttle_seconds=config.throttle_seconds,
            sleep=sleeper,
        )

    monkeypatch.setattr(cli.RateClient, "from_config", staticmethod(_from_config))
    return fetcher, configs


def test_convert_command(patched_client, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--app-id", "abc", "convert", "EUR", "GBP", "90"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["result"] == "80.00"
    assert output["from"] == "EUR"


def test_latest_command_with_base_and_symbols(patched_client, capsys: pytest.CaptureFixture[str]) -> None:
    _, configs = patched_client

    assert cli.main(["--app-id", "abc", "--base", "eur", "--symbols", "GBP", "latest"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert configs[0].base == "EUR"
    assert output["base"] == "EUR"
    assert list(output["rates"]) == ["GBP"]


def test_app_id_from_environment(patched_client, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    _, configs = patched_client
    monkeypatch.setenv("OPENFX_APP_ID", "from-env")

    assert cli.main(["currencies"]) == 0
    assert configs[0].app_id == "from-env"
    assert json.loads(capsys.readouterr().out)["EUR"] == "Euro"


def test_missing_app_id_fails(patched_client) -> None:
    assert cli.main(["latest"]) == 1


def test_upstream_error_exit_code(patched_client, capsys: pytest.CaptureFixture[str]) -> None:
    fetcher, _ = patched_client
    fetcher.overrides["historical/2021-01-01.json"] = error_payload("not_available", status=400)

    assert cli.main(["--app-id", "abc", "historical", "2021-01-01"]) == 1
    assert json.loads(capsys.readouterr().out)["message"] == "not_available"


def test_invalid_date_fails(patched_client) -> None:
    assert cli.main(["--app-id", "abc", "historical", "01/01/2021"]) == 1


def test_timeseries_command(patched_client, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--app-id", "abc", "--throttle", "0", "timeseries", "2021-01-01", "2021-01-03"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert list(output["rates"]) == ["2021-01-01", "2021-01-02"]


def test_verbose_flag_enables_debug_logging(patched_client, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    levels = []
    monkeypatch.setattr(cli, "set_log_level", levels.append)

    assert cli.main(["--app-id", "abc", "--verbose", "currencies"]) == 0
    assert cli.main(["--app-id", "abc", "currencies"]) == 0

    assert levels == [logging.DEBUG]
