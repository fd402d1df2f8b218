"""
Jokester CLI - command-line interface to the joke memory.

Commands:
- generate: Generate a joke that has not been told before
- recent: List the most recent jokes
- stats: Total and last-24h counts
- similar: Rank remembered jokes by similarity to a query
- prune: Remove jokes older than N days
- serve: Run the local HTTP API
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from typing import List, Optional

from jokester.errors import JokeMemoryError
from jokester.infra.config import JokeMemoryConfig, load_config
from jokester.infra.logging_config import setup_logging
from jokester.joke_memory import JokeMemory

logger = logging.getLogger("jokester")


def _format_timestamp(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def _print_json(data) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be zero or a positive integer, got {value}")
    return number


def run_generate(memory: JokeMemory, args) -> int:
    result = asyncio.run(memory.generate_joke_with_memory(args.context, max_attempts=args.max_attempts))
    if args.json:
        _print_json(result.to_dict())
    else:
        print(result.text)
        if result.is_fallback:
            logger.info(f"[CLI] Fallback joke returned after {result.attempts} attempts")
    return 0


def run_recent(memory: JokeMemory, args) -> int:
    jokes = memory.get_recent_jokes(args.limit)
    if args.json:
        _print_json([
            {"id": j.id, "joke": j.text, "timestamp": j.timestamp, "hash": j.content_hash}
            for j in jokes
        ])
        return 0

    if not jokes:
        print("No jokes remembered yet.")
        return 0
    for joke in jokes:
        print(f"[{_format_timestamp(joke.timestamp)}] {joke.text}")
    return 0


def run_stats(memory: JokeMemory, args) -> int:
    stats = memory.get_joke_stats()
    stats["embedding_dimensions"] = memory.get_embedding_dimensions()
    if args.json:
        _print_json(stats)
    else:
        print(f"Total jokes:      {stats['total']}")
        print(f"Last 24 hours:    {stats['recent']}")
        print(f"Embedding dims:   {stats['embedding_dimensions']}")
    return 0


def run_similar(memory: JokeMemory, args) -> int:
    results = asyncio.run(memory.find_similar_jokes(args.query, limit=args.limit))
    if args.json:
        _print_json([
            {"id": r["joke"].id, "joke": r["joke"].text, "similarity": r["similarity"]}
            for r in results
        ])
        return 0

    if not results:
        print("No jokes remembered yet.")
        return 0
    for r in results:
        print(f"{r['similarity']:.4f}  {r['joke'].text}")
    return 0


def run_prune(memory: JokeMemory, args) -> int:
    removed = asyncio.run(memory.clear_old_jokes(args.days))
    print(f"Removed {removed} jokes ({len(memory.store)} remaining)")
    return 0


def run_serve(config: JokeMemoryConfig, args) -> int:
    import uvicorn

    from jokester.api.main import app

    app.state.joke_memory = JokeMemory(config)
    logger.info(f"[CLI] Serving joke memory API on http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Jokester - joke memory with semantic deduplication",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  jokester generate --context "Spreadsheet with 40 tabs named Final"
  jokester recent --limit 5
  jokester similar --query "Why did the developer go broke?"
  jokester prune --days 30
  jokester serve --port 8000
        """
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Path to a .env file (default: ./.env if present)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print machine-readable JSON output"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    generate_parser = subparsers.add_parser("generate", help="Generate a novel joke")
    generate_parser.add_argument(
        "--context",
        type=str,
        required=True,
        help="Description of the captured screen/audio content"
    )
    generate_parser.add_argument(
        "--max-attempts",
        type=_positive_int,
        default=None,
        help="Attempt budget before the fallback joke (default: JOKE_MAX_ATTEMPTS)"
    )

    recent_parser = subparsers.add_parser("recent", help="List recent jokes")
    recent_parser.add_argument("--limit", type=int, default=10, help="Maximum jokes to list")

    subparsers.add_parser("stats", help="Show memory statistics")

    similar_parser = subparsers.add_parser("similar", help="Find jokes similar to a query")
    similar_parser.add_argument("--query", type=str, required=True, help="Text to compare against")
    similar_parser.add_argument("--limit", type=int, default=5, help="Maximum jokes to list")

    prune_parser = subparsers.add_parser("prune", help="Remove old jokes")
    prune_parser.add_argument(
        "--days",
        type=_non_negative_int,
        default=None,
        help="Remove jokes older than this many days (default: JOKE_RETENTION_DAYS)"
    )

    serve_parser = subparsers.add_parser("serve", help="Run the local HTTP API")
    serve_parser.add_argument("--host", type=str, default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    return parser


COMMANDS = {
    "generate": run_generate,
    "recent": run_recent,
    "stats": run_stats,
    "similar": run_similar,
    "prune": run_prune,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    config = load_config(args.env_file)
    setup_logging(config.log_level, log_dir="logs" if config.log_to_file else None)

    if args.command == "serve":
        return run_serve(config, args)

    try:
        memory = JokeMemory(config)
        return COMMANDS[args.command](memory, args)
    except (JokeMemoryError, ValueError) as e:
        logger.error(f"[CLI] {args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
