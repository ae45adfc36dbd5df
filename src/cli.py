"""Command line access to the memory collection.

Usage examples:
    # Top 5 memories about coffee
    memory-bridge search "coffee preferences"

    # More results
    memory-bridge search "travel plans" --limit 10

    # Delete everything in the collection (asks for confirmation)
    memory-bridge wipe
"""

import argparse
import asyncio
import logging
import sys

from src.config import settings
from src.memory.errors import MemoryBridgeError
from src.memory.format import format_search_results
from src.memory.store import Mem0MemoryStore

logger = logging.getLogger(__name__)


async def run_search(store: Mem0MemoryStore, query: str, limit: int) -> int:
    results = await store.search(query, limit=limit)
    if not results:
        print("No memories found.")
        return 0
    print(format_search_results(results))
    return 0


async def run_wipe(store: Mem0MemoryStore, assume_yes: bool = False) -> int:
    if not assume_yes:
        answer = input(
            f'This will permanently delete all memories in "{store.collection}". '
            'Type "yes" to confirm: '
        )
        if answer.strip().lower() != "yes":
            print("Aborted.")
            return 1

    deleted = await store.wipe()
    print(f'Wiped {deleted} memories from "{store.collection}".')
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="memory-bridge",
        description="Long-term memory commands",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search memories")
    search.add_argument("query", help="Search query")
    search.add_argument("--limit", type=int, default=5, help="Max results (default: 5)")

    wipe = sub.add_parser("wipe", help="Delete ALL memories for this collection")
    wipe.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, settings.get_log_level(), logging.INFO),
    )

    try:
        store = Mem0MemoryStore.get()
        if not store.enabled:
            print("ERROR: MEM0_API_KEY is not set", file=sys.stderr)
            return 1

        if args.command == "search":
            return asyncio.run(run_search(store, args.query, max(args.limit, 1)))
        return asyncio.run(run_wipe(store, assume_yes=args.yes))
    except MemoryBridgeError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
