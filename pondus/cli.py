"""
Command-line interface for pondus.

Subcommands:
    rank [--top N]          every provider's ranking (default command)
    check MODEL             one model across providers
    compare A B             two models side by side per provider
    sources [--check-keys]  provider status without scores
    refresh                 clear the cache and re-fetch everything

Rendered output goes to stdout, logs to stderr.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .collect.aliases import load_alias_table
from .collect.cache import CacheStore
from .collect.collector import Collector
from .collect.registry import build_sources
from .config.settings import ConfigError, check_keys, load_settings
from .logging_config import configure_logging, level_from_verbosity
from .output import FORMATS, render

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_CONFIG = 2


def build_collector(args: argparse.Namespace) -> Collector:
    """Wire settings, cache, aliases and adapters for one invocation."""
    settings = load_settings(Path(args.config) if args.config else None)
    cache = CacheStore(settings.cache_dir, ttl_hours=settings.cache_ttl_hours)
    aliases = load_alias_table(override_path=settings.alias_path)
    sources = build_sources(settings, aliases)
    collector = Collector(sources, cache, aliases, settings)

    if args.refresh:
        removed = cache.invalidate_all()
        logger.info(f"--refresh: removed {removed} cache entries")

    return collector


def cmd_rank(args: argparse.Namespace) -> int:
    """Show every provider's ranking."""
    if args.top is not None and args.top < 1:
        print("Error: --top must be at least 1", file=sys.stderr)
        return EXIT_USAGE
    envelope = build_collector(args).rank(top=args.top)
    print(render(envelope, args.format))
    return EXIT_OK


def cmd_check(args: argparse.Namespace) -> int:
    """Show one model's score from every provider."""
    envelope = build_collector(args).check(args.model)
    print(render(envelope, args.format))
    return EXIT_OK


def cmd_compare(args: argparse.Namespace) -> int:
    envelope = build_collector(args).compare(args.model_a, args.model_b)
    print(render(envelope, args.format))
    return EXIT_OK


def cmd_sources(args: argparse.Namespace) -> int:
    """Show provider status, optionally with prerequisite checks."""
    collector = build_collector(args)

    if args.check_keys:
        print("Prerequisite Status:")
        print("-" * 40)
        for name, status in check_keys(collector.settings).items():
            print(f"  {name}: {status}")
        print()

    print(render(collector.sources(), args.format))
    return EXIT_OK


def cmd_refresh(args: argparse.Namespace) -> int:
    """Clear the cache, then rank from live fetches."""
    envelope = build_collector(args).refresh(top=getattr(args, "top", None))
    print(render(envelope, args.format))
    return EXIT_OK


def add_global_options(parser: argparse.ArgumentParser, suppress_defaults: bool = False) -> None:
    """Options accepted both before and after the subcommand.

    After the subcommand the defaults are suppressed so they don't
    overwrite a value given before it.
    """
    def default(value):
        return argparse.SUPPRESS if suppress_defaults else value

    parser.add_argument("--format", "-f", default=default("json"), choices=list(FORMATS) + ["md"],
                        help="Output format (default: json)")
    parser.add_argument("--refresh", action="store_true", default=default(False),
                        help="Ignore cached results for this run")
    parser.add_argument("--config", default=default(None),
                        help="Config file (default: $XDG_CONFIG_HOME/pondus/config.yaml)")
    parser.add_argument("--verbose", "-v", action="count", default=default(0),
                        help="Increase log verbosity (-v info, -vv debug)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pondus",
        description="Aggregate AI model benchmark leaderboards into one normalized view",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pondus rank --top 10
  pondus check claude-opus-4.6
  pondus compare gpt-5 "Claude Opus 4.6" --format table
  pondus sources --check-keys
  pondus --refresh rank
""",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    add_global_options(parser)

    common = argparse.ArgumentParser(add_help=False)
    add_global_options(common, suppress_defaults=True)

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # rank command
    rank_parser = subparsers.add_parser("rank", parents=[common], help="Show every provider's ranking")
    rank_parser.add_argument("--top", "-n", type=int, help="Keep the first N entries per provider")
    rank_parser.set_defaults(func=cmd_rank)

    # check command
    check_parser = subparsers.add_parser("check", parents=[common], help="Show one model across providers")
    check_parser.add_argument("model", help="Model name or alias")
    check_parser.set_defaults(func=cmd_check)

    # compare command
    compare_parser = subparsers.add_parser("compare", parents=[common], help="Compare two models per provider")
    compare_parser.add_argument("model_a", help="First model")
    compare_parser.add_argument("model_b", help="Second model")
    compare_parser.set_defaults(func=cmd_compare)

    # sources command
    sources_parser = subparsers.add_parser("sources", parents=[common], help="Show provider status")
    sources_parser.add_argument("--check-keys", action="store_true",
                                help="Also report API key and browser tool availability")
    sources_parser.set_defaults(func=cmd_sources)

    # refresh command
    refresh_parser = subparsers.add_parser("refresh", parents=[common], help="Clear the cache and re-fetch all providers")
    refresh_parser.add_argument("--top", "-n", type=int, help="Keep the first N entries per provider")
    refresh_parser.set_defaults(func=cmd_refresh)

    return parser


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(level_from_verbosity(args.verbose))

    if not args.command:
        args.command = "rank"
        args.top = None
        args.func = cmd_rank

    try:
        return args.func(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG


if __name__ == "__main__":
    sys.exit(main())
