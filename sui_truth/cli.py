"""
Address Trust - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line access to the resolution service.

- Resolve one or more addresses / coin types
- Resolve a .sui name
- Loads configuration from environment, overridable by flags

============================================================
USAGE
============================================================
python -m sui_truth.cli resolve 0x2 0x5 0x2::sui::SUI
python -m sui_truth.cli resolve --json 0xdee9
python -m sui_truth.cli name alice.sui

============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from sui_truth.config import ServiceConfig
from sui_truth.exceptions import ConfigurationError
from sui_truth.models import AddressProfile
from sui_truth.service import AddressTrustService


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sui-truth",
        description="Resolve Sui addresses into trust verdicts",
    )

    parser.add_argument(
        "--endpoint",
        type=str,
        metavar="URL",
        help="Fullnode JSON-RPC endpoint (default: from environment)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Per-call RPC timeout (default: from environment)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: from environment)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version="%(prog)s 1.0.0",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve_parser = subparsers.add_parser("resolve", help="Resolve addresses or coin types")
    resolve_parser.add_argument("addresses", nargs="+", metavar="ADDRESS")
    resolve_parser.add_argument(
        "--json",
        action="store_true",
        help="Print profiles as JSON",
    )

    name_parser = subparsers.add_parser("name", help="Resolve a .sui name to an address")
    name_parser.add_argument("domain", metavar="DOMAIN")

    return parser


# ============================================================
# CLI CONFIGURATION BUILDER
# ============================================================

def build_config(args: argparse.Namespace) -> ServiceConfig:
    """Environment configuration with CLI overrides applied."""
    config = ServiceConfig.from_env()
    if args.endpoint:
        config.rpc_endpoint = args.endpoint
    if args.timeout is not None:
        config.rpc_timeout_seconds = args.timeout
    if args.log_level:
        config.log_level = args.log_level
    return config


def format_profile(profile: AddressProfile) -> str:
    """One line per profile for terminal output."""
    parts = [
        f"{profile.risk_level.value:<10}",
        f"{profile.type.value:<8}",
        profile.address,
    ]
    if profile.label:
        parts.append(f"- {profile.label}")
    if profile.error:
        parts.append(f"[error: {profile.error}]")
    return " ".join(parts)


# ============================================================
# MAIN ENTRY POINT
# ============================================================

async def async_main(args: argparse.Namespace, config: ServiceConfig) -> int:
    """
    Async main entry point.

    Args:
        args: Parsed arguments
        config: Service configuration

    Returns:
        Exit code
    """
    async with AddressTrustService(config=config) as service:
        if args.command == "name":
            address = await service.resolve_name(args.domain)
            if address is None:
                print(f"{args.domain}: not resolved", file=sys.stderr)
                return 1
            print(address)
            return 0

        profiles = await service.resolve_many(args.addresses)

        if args.json:
            print(json.dumps(
                {address: profile.to_dict() for address, profile in profiles.items()},
                indent=2,
            ))
        else:
            for profile in profiles.values():
                print(format_profile(profile))

        return 0 if profiles else 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)

        logging.basicConfig(
            level=getattr(logging, config.log_level, logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        return asyncio.run(async_main(args, config))
    except ConfigurationError as e:
        for error in e.errors or [e.message]:
            print(f"Error: {error}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
