from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from notifyhub.config import load_config
from notifyhub.logging_utils import setup_logging
from notifyhub.service import NotificationService


PROJECT_ROOT = Path(__file__).resolve().parent
_config_override = os.getenv("NOTIFYHUB_CONFIG")
CONFIG_PATH = Path(_config_override) if _config_override else PROJECT_ROOT / "config.yaml"

_OPTION_FLAGS = (
    "force_send",
    "combined_only",
    "require_all_channels",
    "fail_fast",
    "validate_templates_first",
)


def _parse_data(pairs: List[str]) -> Dict[str, str]:
    data: Dict[str, str] = {}
    for pair in pairs:
        if "=" not in pair:
            raise SystemExit(f"Invalid --data entry '{pair}', expected key=value")
        key, value = pair.split("=", 1)
        data[key.strip()] = value
    return data


def _collect_options(args: argparse.Namespace) -> Dict[str, Any]:
    options: Dict[str, Any] = {flag: True for flag in _OPTION_FLAGS if getattr(args, flag, False)}
    if getattr(args, "sequential", False):
        options["parallel_send"] = False
    return options


async def _run(args: argparse.Namespace) -> Dict[str, Any]:
    app_config = load_config(str(args.config))
    settings = app_config.notifyhub
    setup_logging(settings.logging.directory, level=settings.logging.level)
    service = NotificationService(settings)
    try:
        data = _parse_data(args.data)
        options = _collect_options(args)
        if args.command == "send":
            result = await service.send_notification_by_preference(args.recipient, args.type, data, options)
        else:
            recipients = [entry.strip() for entry in args.recipients.split(",") if entry.strip()]
            result = await service.send_batch(recipients, args.type, data, options)
        return result.to_dict()
    finally:
        await service.aclose()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send notifications according to stored user preferences.")
    parser.add_argument("--config", type=Path, default=CONFIG_PATH, help="Path to the YAML configuration file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--type", required=True, help="Notification type, e.g. welcome or otp.")
        sub.add_argument("--data", action="append", default=[], metavar="KEY=VALUE", help="Template data.")
        sub.add_argument("--force-send", dest="force_send", action="store_true")
        sub.add_argument("--combined-only", dest="combined_only", action="store_true")
        sub.add_argument("--require-all-channels", dest="require_all_channels", action="store_true")

    send_parser = subparsers.add_parser("send", help="Notify a single recipient.")
    send_parser.add_argument("recipient", help="Recipient user id (usually an email address).")
    add_common(send_parser)

    batch_parser = subparsers.add_parser("batch", help="Notify several recipients.")
    batch_parser.add_argument("recipients", help="Comma-separated recipient user ids.")
    add_common(batch_parser)
    batch_parser.add_argument("--sequential", action="store_true", help="Process recipients one at a time.")
    batch_parser.add_argument("--fail-fast", dest="fail_fast", action="store_true")
    batch_parser.add_argument("--validate-templates-first", dest="validate_templates_first", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if not args.config.exists():
        print(f"Missing config file at {args.config}", file=sys.stderr)
        return 2
    payload = asyncio.run(_run(args))
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0 if payload.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
