from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Sequence

from fleet_dashboard.bootstrap import ROLES, TIERS, build_api, build_context, run_dashboard
from fleet_dashboard.config import SettingsManager
from fleet_dashboard.utils import LoggingOptions, configure_logging, get_logger, log_file_path


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fleet-dashboard",
        description="Render the Fleet dashboard cards for a caller profile.",
    )
    parser.add_argument("--path", default="/dashboard", help="Dashboard route to open")
    parser.add_argument("--team-id", type=int, default=None, help="Team to select after load")
    parser.add_argument("--tier", choices=TIERS, default="free")
    parser.add_argument("--role", choices=ROLES, default="admin")
    parser.add_argument(
        "--global-team",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Whether the caller is on the global team",
    )
    parser.add_argument("--org-name", default=None)
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(LoggingOptions(debug=args.debug, level="WARNING"))
    if args.debug:
        sys.stderr.write(f"Writing debug log to {log_file_path()}\n")
    logger = get_logger(__name__)

    try:
        settings = SettingsManager().load()
    except ValueError as exc:
        logger.error("Invalid dashboard settings", error=str(exc))
        return 2
    if not settings.is_configured:
        logger.error("Fleet server URL and API token must be configured")
        return 2

    context = build_context(
        tier=args.tier,
        role=args.role,
        on_global_team=args.global_team,
        org_name=args.org_name,
    )

    async def _run() -> object:
        api = build_api(settings)
        try:
            return await run_dashboard(
                api,
                context,
                settings=settings,
                pathname=args.path,
                team_id=args.team_id,
            )
        finally:
            await api.close()

    try:
        output = asyncio.run(_run())
    except KeyboardInterrupt:
        logger.info("Dashboard interrupted by user")
        return 130
    sys.stdout.write(f"{output}\n")
    return 0


__all__ = ["main"]
