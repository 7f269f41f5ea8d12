"""Command-line interface.

Loads the configuration the way an application would and prints it::

    subconfig show --config-root config --env local
    subconfig show database.host --host admin.example.com
    subconfig scenario --env production
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from .loader.file import ConfigurationError, FileLoader
from .models.schemas import SubconfigSettings
from .provider import SubconfigProvider
from .resolver import CommandLineContext, RequestContext
from .store import ConfigStore
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="subconfig",
        description="Load subproject and environment configuration tiers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Environment variables:\n"
            "  APP_ENV            environment name (default: production)\n"
            "  SUBCONFIG_*        loader settings, e.g. SUBCONFIG_CONFIG_ROOT\n"
            "  SUBCONFIG_LOG_CFG  logging dictConfig YAML file\n"
        ),
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config-root", type=Path, help="Configuration root directory"
    )
    common.add_argument("--env", dest="environment", help="Environment name")
    common.add_argument(
        "--host",
        help="Resolve the subproject from this request host instead of 'cli'",
    )
    common.add_argument(
        "--base", type=Path, help="YAML/JSON file with the base configuration tree"
    )
    common.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console logging level",
    )
    common.add_argument("--log-config", type=Path, help="Logging dictConfig YAML file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser(
        "show", parents=[common], help="Print the loaded configuration"
    )
    show.add_argument("key", nargs="?", help="Only print this dot-notation key")
    show.add_argument(
        "--format", choices=["yaml", "json"], default="yaml", help="Output format"
    )

    subparsers.add_parser(
        "scenario", parents=[common], help="Print the tiers and their files"
    )

    return parser


def _dump(value: Any, format: str) -> str:
    if format == "json":
        return json.dumps(value, indent=2, default=str)
    return yaml.safe_dump(value, default_flow_style=False, sort_keys=False).rstrip()


def _make_provider(
    args: argparse.Namespace, settings: SubconfigSettings
) -> SubconfigProvider:
    base = FileLoader().load_file(args.base) if args.base else None
    context = RequestContext(args.host) if args.host else CommandLineContext()

    return SubconfigProvider(
        ConfigStore(base),
        context=context,
        settings=settings,
        environment=args.environment,
    )


def _show(provider: SubconfigProvider, args: argparse.Namespace) -> int:
    provider.register()

    if args.key is None:
        print(_dump(provider.store.all(), args.format))
        return 0

    if not provider.store.has(args.key):
        print(f"Key not found: {args.key}", file=sys.stderr)
        return 1
    print(_dump(provider.store.get(args.key), args.format))
    return 0


def _scenario(provider: SubconfigProvider, args: argparse.Namespace) -> int:
    print(f"subproject:  {provider.resolver.resolve()}")
    print(f"environment: {provider.environment}")
    for descriptor, path in provider.tier_files():
        marker = "found" if path.is_file() else "missing"
        print(f"  {'.'.join(descriptor):<40} {path} ({marker})")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Run the command line interface.

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = SubconfigSettings.from_environment(config_root=args.config_root)
    except ValidationError as e:
        setup_logging(config_path=args.log_config, level=args.log_level)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(
        config_path=args.log_config, level=args.log_level, settings=settings.logging
    )

    try:
        provider = _make_provider(args, settings)
    except (ConfigurationError, ValidationError) as e:
        logger.debug("Failed to set up the provider", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.command == "show":
        return _show(provider, args)
    return _scenario(provider, args)


if __name__ == "__main__":
    sys.exit(main())
