#!/usr/bin/env python3
"""
poemfinder - PoetryDB search and word analysis

Main entry point for one-shot queries and the interactive prompt.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from poemfinder import __version__
from poemfinder.config.config_manager import get_config_manager
from poemfinder.core.orchestrator import SearchOrchestrator
from poemfinder.data.poetry_client import PoetryClientFactory
from poemfinder.interface.cli_interface import CLIInterface
from poemfinder.models.poem import SearchCriteria
from poemfinder.utils.logging_config import configure_logging_from_config

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poemfinder",
        description="Search PoetryDB and analyse word usage in poems",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Search by author
  poemfinder --author "Emily Dickinson"

  # Exact author and title
  poemfinder --author Frost --title "Fire and Ice" --exact

  # Three random poems, highlighting a word
  poemfinder --random 3 --word night

  # Rank a random pool of 200 poems by a word and keep the top 5
  poemfinder --word love --top --pool-size 200 --top-k 5

  # Interactive prompt
  poemfinder -i
        """
    )

    parser.add_argument("-c", "--config", type=str,
                        help="Path to a YAML configuration file (default: bundled config)")
    parser.add_argument("-a", "--author", type=str, help="Author filter")
    parser.add_argument("-t", "--title", type=str, help="Title filter")
    parser.add_argument("-e", "--exact", action="store_true",
                        help="Case-literal matching of author and title")
    parser.add_argument("-r", "--random", type=int, metavar="N",
                        help="Fetch N random poems instead of searching")
    parser.add_argument("-w", "--word", type=str, help="Word to count and highlight")
    parser.add_argument("--best", action="store_true",
                        help="Select the result that uses --word most")
    parser.add_argument("--top", action="store_true",
                        help="Rank a random pool by --word and keep the best poems")
    parser.add_argument("--pool-size", type=int, help="Random pool size for --top")
    parser.add_argument("--top-k", type=int, help="Number of poems kept by --top")
    parser.add_argument("-i", "--interactive", action="store_true",
                        help="Start the interactive prompt")
    parser.add_argument("--log-level", type=str, help="Override the configured log level")
    parser.add_argument("--version", action="version", version=f"poemfinder {__version__}")
    return parser


async def run_once(orchestrator: SearchOrchestrator, args: argparse.Namespace) -> int:
    """Run a single retrieval described by the command line; returns the exit code"""
    if args.word:
        orchestrator.set_word(args.word)

    if args.top:
        if not orchestrator.state.word.strip():
            print("Error: --top requires --word", file=sys.stderr)
            return 2
        await orchestrator.top_by_word(args.pool_size, args.top_k)
    elif args.random:
        await orchestrator.random(args.random)
    else:
        orchestrator.state.criteria = SearchCriteria(author=args.author, title=args.title,
                                                     exact=args.exact)
        await orchestrator.search()

    if args.best:
        orchestrator.find_best_in_current_results()

    return 1 if orchestrator.state.error is not None else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    for name in ("random", "pool_size", "top_k"):
        value = getattr(args, name)
        if value is not None and value < 1:
            parser.error(f"--{name.replace('_', '-')} must be positive")

    config_manager = get_config_manager(args.config)
    configure_logging_from_config(config_manager.get_logging_config(), args.log_level)

    client = PoetryClientFactory.create_client('poetrydb', config_manager.get_client_config())
    logger.debug(f"Using PoetryDB at {client.query_builder.base_url}")
    orchestrator = SearchOrchestrator.from_config(client, config_manager.get_search_config())
    interface = CLIInterface(orchestrator, {"log_level": args.log_level or "WARNING"})

    if args.interactive:
        interface.run()
        return 0

    try:
        exit_code = asyncio.run(run_once(orchestrator, args))
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130
    finally:
        interface.cleanup()

    interface.render_results()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
