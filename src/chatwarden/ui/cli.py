from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import fields
from datetime import datetime
from enum import Enum
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING
from uuid import UUID

from dotenv import load_dotenv

from chatwarden.app import build_instance_service
from chatwarden.config import configure_logging
from chatwarden.domain.filters import Display, SponsorshipHistoryFilter
from chatwarden.domain.model import ChatType
from chatwarden.domain.result import Err

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from chatwarden.domain.instances import InstanceService
    from chatwarden.domain.model import Entity
    from chatwarden.domain.result import Result

log = logging.getLogger(__name__)


class OperationFailedError(RuntimeError):
    """Raised when a service call comes back as ``Err``."""


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile chat instances and sponsorships")
    subparsers = parser.add_subparsers(dest="command", required=True)

    term = subparsers.add_parser("term", help="Terms of service commands")
    term_sub = term.add_subparsers(dest="term_command", required=True)
    term_sub.add_parser("show", help="Show the terms of service (created empty if absent)")

    chat = subparsers.add_parser("chat", help="Chat commands")
    chat_sub = chat.add_subparsers(dest="chat_command", required=True)
    chat_sync = chat_sub.add_parser("sync", help="Create or update a chat by id")
    chat_sync.add_argument("--id", type=int, required=True, help="Telegram chat id")
    chat_sync.add_argument(
        "--type",
        type=ChatType,
        choices=list(ChatType),
        required=True,
        help="Chat type",
    )
    chat_sync.add_argument("--title", type=str, help="Chat title")
    chat_release = chat_sub.add_parser("release", help="Cancel the takeover of a chat")
    chat_release.add_argument("--id", type=int, required=True, help="Telegram chat id")

    permissions = subparsers.add_parser("permissions", help="Permission commands")
    permissions_sub = permissions.add_subparsers(dest="permissions_command", required=True)
    permissions_reset = permissions_sub.add_parser(
        "reset",
        help="Replace the permission list of a chat with the records of a JSON file",
    )
    permissions_reset.add_argument("--chat-id", type=int, required=True, help="Telegram chat id")
    permissions_reset.add_argument(
        "--file",
        type=Path,
        required=True,
        help="JSON file holding a list of permission records",
    )

    sponsors = subparsers.add_parser("sponsors", help="Sponsor commands")
    sponsors_sub = sponsors.add_subparsers(dest="sponsors_command", required=True)
    sponsors_sub.add_parser("list", help="List sponsors, most recently updated first")

    sponsorships = subparsers.add_parser("sponsorships", help="Sponsorship history commands")
    sponsorships_sub = sponsorships.add_subparsers(dest="sponsorships_command", required=True)
    sponsorships_list = sponsorships_sub.add_parser("list", help="List sponsorship histories")
    reached = sponsorships_list.add_mutually_exclusive_group()
    reached.add_argument(
        "--reached",
        dest="has_reached",
        action="store_const",
        const=True,
        help="Only reached sponsorships",
    )
    reached.add_argument(
        "--not-reached",
        dest="has_reached",
        action="store_const",
        const=False,
        help="Only sponsorships not reached yet",
    )
    sponsorships_list.add_argument(
        "--display",
        type=Display,
        choices=list(Display),
        help="Filter by visibility",
    )
    sponsorships_create = sponsorships_sub.add_parser(
        "create",
        help="Create a sponsorship history (and its sponsor) from a JSON file",
    )
    sponsorships_create.add_argument(
        "--file",
        type=Path,
        required=True,
        help="JSON file holding the sponsorship payload, optionally with a 'sponsor' object",
    )

    return parser.parse_args(list(argv))


def _load_json(path: Path) -> object:
    try:
        with path.open(encoding="utf-8") as handle:
            return json.load(handle)
    except OSError as exc:
        raise ValueError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc


def _load_records(path: Path) -> list[dict[str, object]]:
    document = _load_json(path)
    if not isinstance(document, list) or not all(isinstance(item, dict) for item in document):
        raise ValueError(f"{path} must hold a JSON list of objects")
    return document


def _load_object(path: Path) -> dict[str, object]:
    document = _load_json(path)
    if not isinstance(document, dict):
        raise ValueError(f"{path} must hold a JSON object")
    return document


def _json_default(value: object) -> object:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Cannot serialise {type(value).__name__}")


def entity_payload(entity: Entity) -> dict[str, object]:
    """Plain dict view of an entity for output."""

    payload: dict[str, object] = {
        field.name: getattr(entity, field.name) for field in fields(entity)
    }
    # relationships are only reported when already loaded
    sponsor = vars(entity).get("sponsor")
    if sponsor is not None:
        payload["sponsor"] = entity_payload(sponsor)
    return payload


def _emit(value: object) -> None:
    print(json.dumps(value, default=_json_default, sort_keys=True))  # noqa: T201


def _unwrap[T](result: Result[T, Exception], action: str) -> T:
    if isinstance(result, Err):
        raise OperationFailedError(f"{action} failed: {result.error}")
    return result.value


def _run(parsed_args: argparse.Namespace, service: InstanceService) -> None:  # noqa: C901
    command = parsed_args.command
    if command == "term" and parsed_args.term_command == "show":
        term = _unwrap(service.fetch_term(), "fetch term")
        _emit(entity_payload(term))
    elif command == "chat" and parsed_args.chat_command == "sync":
        params: dict[str, object] = {"type": parsed_args.type}
        if parsed_args.title is not None:
            params["title"] = parsed_args.title
        chat = _unwrap(service.fetch_and_update_chat(parsed_args.id, params), "chat sync")
        log.info("Synchronised chat %s", chat.id)
        _emit(entity_payload(chat))
    elif command == "chat" and parsed_args.chat_command == "release":
        found = _unwrap(service.get_chat(parsed_args.id), "chat lookup")
        if found is None:
            raise OperationFailedError(f"Chat {parsed_args.id} not found")
        chat = _unwrap(service.cancel_chat_takeover(found), "chat release")
        _emit(entity_payload(chat))
    elif command == "permissions" and parsed_args.permissions_command == "reset":
        found = _unwrap(service.get_chat(parsed_args.chat_id), "chat lookup")
        if found is None:
            raise OperationFailedError(f"Chat {parsed_args.chat_id} not found")
        summary = _unwrap(
            service.reset_chat_permissions(found, parsed_args.records),
            "permissions reset",
        )
        log.info(
            "Reset permissions of chat %s: created=%s, updated=%s, deleted=%s",
            found.id,
            summary.created,
            summary.updated,
            summary.deleted,
        )
        _emit({"created": summary.created, "updated": summary.updated, "deleted": summary.deleted})
    elif command == "sponsors" and parsed_args.sponsors_command == "list":
        sponsors = _unwrap(service.find_sponsors(), "sponsor listing")
        _emit([entity_payload(sponsor) for sponsor in sponsors])
    elif command == "sponsorships" and parsed_args.sponsorships_command == "list":
        criteria = SponsorshipHistoryFilter(
            has_reached=parsed_args.has_reached,
            display=parsed_args.display,
            preload_sponsor=True,
        )
        histories = _unwrap(service.find_sponsorship_histories(criteria), "sponsorship listing")
        _emit([entity_payload(history) for history in histories])
    elif command == "sponsorships" and parsed_args.sponsorships_command == "create":
        payload = parsed_args.payload
        if "sponsor" in payload:
            result = service.create_sponsorship_history_with_sponsor(payload)
        else:
            result = service.create_sponsorship_history(payload)
        history = _unwrap(result, "sponsorship creation")
        log.info("Created sponsorship history %s", history.id)
        _emit(entity_payload(history))
    else:
        raise ValueError(f"Unsupported command: {command}")


def main(
    argv: Sequence[str] | None = None,
    *,
    service_factory: Callable[[], InstanceService] = build_instance_service,
) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.command == "permissions":
            parsed_args.records = _load_records(parsed_args.file)
        elif parsed_args.command == "sponsorships" and parsed_args.sponsorships_command == "create":
            parsed_args.payload = _load_object(parsed_args.file)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        _run(parsed_args, service_factory())
    except Exception:
        log.exception("Command failed")
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
