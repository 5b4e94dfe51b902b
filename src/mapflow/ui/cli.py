from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from mapflow.app import delete_map, load_maps, show_map_details
from mapflow.config import configure_logging
from mapflow.domain.model import OutcomeResult
from mapflow.domain.orchestration import (
    IntentFailed,
    MapDeleted,
    MapsLoaded,
    MapsLoadError,
    NoticeLevel,
    Notification,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from mapflow.domain.orchestration import OrchestrationEvent

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage maps stored in GeoStore")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    maps = subparsers.add_parser("load-maps", help="Search the map catalogue")
    maps.add_argument("search_text", nargs="?", default="*", help="Text to search for")
    maps.add_argument(
        "--start",
        type=int,
        default=0,
        help="Index of the first result (default: %(default)s)",
    )
    maps.add_argument(
        "--limit",
        type=int,
        default=12,
        help="Page size (default: %(default)s)",
    )

    delete = subparsers.add_parser(
        "delete-map",
        help="Delete a map with its details and thumbnail",
    )
    delete.add_argument("map_id", type=int, help="Id of the map resource")

    details = subparsers.add_parser("details", help="Print the details document of a map")
    details.add_argument("map_id", type=int, help="Id of the map resource")

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace) -> None:
    if args.command == "load-maps":
        if args.start < 0:
            raise ValueError("--start must be non-negative")
        if args.limit <= 0:
            raise ValueError("--limit must be positive")
    elif args.map_id <= 0:
        raise ValueError("map_id must be positive")


def _report(events: Sequence[OrchestrationEvent]) -> bool:
    """Log what happened; return whether everything went through."""

    ok = True
    for event in events:
        match event:
            case MapsLoaded(page=page):
                log.info("Found %s maps", page.total_count)
                for item in page.results:
                    log.info("  %s: %s", item.id, item.name)
            case MapsLoadError(error=error):
                log.error("Loading maps failed: %s", error)
                ok = False
            case MapDeleted(map_id=map_id, result=result):
                log.info("Map %s deleted: %s", map_id, result)
                ok = ok and result is OutcomeResult.SUCCESS
            case Notification(level=NoticeLevel.ERROR, message=message):
                log.error("%s", message)
                ok = False
            case Notification(message=message):
                log.info("%s", message)
            case IntentFailed(intent=intent, error=error):
                log.error("%s failed: %s", type(intent).__name__, error)
                ok = False
            case _:
                log.debug("%s", event)
    return ok


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "load-maps":
            ok = _report(
                load_maps(
                    parsed_args.search_text,
                    start=parsed_args.start,
                    limit=parsed_args.limit,
                )
            )
        elif parsed_args.command == "delete-map":
            ok = _report(delete_map(parsed_args.map_id))
        elif parsed_args.command == "details":
            text = show_map_details(parsed_args.map_id)
            if text is None:
                log.info("Map %s has no details", parsed_args.map_id)
            else:
                sys.stdout.write(f"{text}\n")
            ok = True
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)

    if not ok:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
