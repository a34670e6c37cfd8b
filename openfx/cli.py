"""Command line access to latest, historical and time-series exchange rates."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Sequence

from openfx.client import RateClient
from openfx.config import ClientConfig
from openfx.errors import OpenFXError
from openfx.models import ConversionResult, RateTable, TimeSeries, UpstreamError
from openfx.utils.logger import get_logger, set_log_level

LOGGER = get_logger(__name__)

__all__ = ["build_parser", "parse_args", "main"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="openfx", description=__doc__)
    parser.add_argument("--app-id", dest="app_id", help="API credential (default: $OPENFX_APP_ID)")
    parser.add_argument("--base", help="Base currency (default: $OPENFX_BASE or USD)")
    parser.add_argument("--symbols", help="Comma separated currencies to keep")
    parser.add_argument("--cache-url", dest="cache_url", help="Cache DSN, e.g. sqlite:///openfx.db")
    parser.add_argument(
        "--no-cache",
        dest="skip_cache",
        action="store_true",
        default=False,
        help="Bypass the cache for this request",
    )
    parser.add_argument(
        "--throttle",
        dest="throttle_seconds",
        type=float,
        help="Seconds to wait between time-series requests",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("latest", help="Latest rates")
    historical = subparsers.add_parser("historical", help="Rates for one day")
    historical.add_argument("date", help="Date (YYYY-MM-DD)")
    subparsers.add_parser("currencies", help="Currency catalog")
    series = subparsers.add_parser("timeseries", help="Daily rates for [start, end)")
    series.add_argument("start", help="Start date (YYYY-MM-DD)")
    series.add_argument("end", help="End date, exclusive (YYYY-MM-DD)")
    convert = subparsers.add_parser("convert", help="Convert an amount")
    convert.add_argument("from_currency", metavar="FROM")
    convert.add_argument("to_currency", metavar="TO")
    convert.add_argument("amount", type=float)
    convert.add_argument("--decimals", type=int, default=2)
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> ClientConfig:
    env_config: ClientConfig | None
    try:
        env_config = ClientConfig.from_env()
    except ValueError:
        env_config = None
    app_id = args.app_id or (env_config.app_id if env_config else None)
    if not app_id:
        raise ValueError("An app id is required (--app-id or OPENFX_APP_ID)")
    config = env_config or ClientConfig(app_id=app_id)
    config.app_id = app_id
    if args.base:
        config.base = args.base.upper()
    if args.symbols:
        config.symbols = args.symbols
    if args.cache_url:
        config.cache_url = args.cache_url
    if args.throttle_seconds is not None:
        config.throttle_seconds = args.throttle_seconds
    return config


def _to_jsonable(result: Any) -> Any:
    if isinstance(result, (RateTable, TimeSeries, UpstreamError)):
        return result.to_payload()
    if isinstance(result, ConversionResult):
        return {
            "from": result.from_currency,
            "to": result.to_currency,
            "from_rate": result.from_rate,
            "to_rate": result.to_rate,
            "amount": result.amount,
            "result": result.result,
        }
    return result


def run(client: RateClient, args: argparse.Namespace) -> Any:
    if args.command == "latest":
        return client.get_latest_rates(skip_cache=args.skip_cache)
    if args.command == "historical":
        return client.get_historical(args.date, skip_cache=args.skip_cache)
    if args.command == "currencies":
        return client.get_all_currencies(skip_cache=args.skip_cache)
    if args.command == "timeseries":
        return client.get_time_series(args.start, args.end, skip_cache=args.skip_cache)
    return client.convert(args.from_currency, args.to_currency, args.amount, args.decimals)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        set_log_level(logging.DEBUG)
    try:
        config = _resolve_config(args)
        with RateClient.from_config(config) as client:
            result = run(client, args)
    except (OpenFXError, ValueError) as exc:
        LOGGER.error("%s", exc)
        return 1

    print(json.dumps(_to_jsonable(result), indent=2, sort_keys=True, default=str))
    return 1 if isinstance(result, UpstreamError) else 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
