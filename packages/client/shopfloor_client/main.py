"""
Client entry point.

Loads configuration, configures logging, and runs one of the polling views:
- notifications: the employee's inbox with an unread badge
- chat: a rush order's discussion thread; lines typed on stdin are sent
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import uuid

import structlog

from shopfloor_shared.logging_setup import configure_logging

from .api import ShopfloorAPI
from .chat import RushOrderChat
from .config import ClientConfig, load_config
from .notifications import NotificationDropdown
from .render import format_message, format_notification


def _toast(message: str) -> None:
    print(f"! {message}", file=sys.stderr)


async def run_notifications(api: ShopfloorAPI, config: ClientConfig, args) -> None:
    dropdown: NotificationDropdown

    def render() -> None:
        print(f"--- notifications [{dropdown.badge or '0'}] ---")
        for n in dropdown.notifications:
            print(format_notification(n))

    dropdown = NotificationDropdown(
        api,
        config.employee_id,
        interval=config.polling.notifications_interval_seconds,
        on_navigate=lambda path: print(f"-> {path}"),
        on_toast=_toast,
        on_change=render,
    )

    if args.mark_all:
        await dropdown.refresh()
        await dropdown.mark_all_as_read()
        return
    if args.once:
        await dropdown.refresh()
        return

    await dropdown.mount()
    try:
        await asyncio.Event().wait()
    finally:
        await dropdown.dispose()


async def run_chat(api: ShopfloorAPI, config: ClientConfig, args) -> None:
    shown: set[uuid.UUID] = set()
    chat: RushOrderChat

    def show_new() -> None:
        for m in chat.messages:
            if m.id not in shown:
                shown.add(m.id)
                print(format_message(m))

    chat = RushOrderChat(
        api,
        args.rush_order_id,
        interval=config.polling.chat_interval_seconds,
        on_scroll_to_latest=show_new,
        on_toast=_toast,
    )

    if args.send is not None:
        chat.draft = args.send
        ok = await chat.send()
        if not ok:
            sys.exit(1)
        return
    if args.once:
        await chat.refresh()
        await api.mark_messages_as_read(args.rush_order_id)
        return

    await chat.mount()
    loop = asyncio.get_running_loop()
    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            chat.draft = line
            await chat.send()
            await api.mark_messages_as_read(args.rush_order_id)
    finally:
        await chat.dispose()


async def _main(config: ClientConfig, args) -> None:
    token = config.api.token
    async with ShopfloorAPI(
        config.api.url,
        token,
        verify_tls=config.api.verify_tls,
        request_timeout=config.api.request_timeout_seconds,
    ) as api:
        if not await api.check_health():
            # Keep going: polling shows stale data until the server is back.
            structlog.get_logger().warning("client.server_unreachable", url=config.api.url)
        if args.command == "notifications":
            await run_notifications(api, config, args)
        else:
            await run_chat(api, config, args)


def run() -> None:
    """CLI entry point for the polling client."""
    parser = argparse.ArgumentParser(description="Shopfloor Hub polling client")
    parser.add_argument(
        "-c", "--config",
        default="shopfloor-client.yaml",
        help="Path to configuration file (default: shopfloor-client.yaml)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    notif = sub.add_parser("notifications", help="Watch your notifications")
    notif.add_argument("--once", action="store_true", help="Fetch once and exit")
    notif.add_argument("--mark-all", action="store_true", help="Mark everything read and exit")

    chat = sub.add_parser("chat", help="Follow a rush order's discussion thread")
    chat.add_argument("rush_order_id", type=uuid.UUID)
    chat.add_argument("--once", action="store_true", help="Print the thread and exit")
    chat.add_argument("--send", metavar="TEXT", help="Send one message and exit")

    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except Exception as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)

    if not config.api.token:
        print(f"Error: set {config.api.token_env} to your bearer token", file=sys.stderr)
        sys.exit(1)
    if args.command == "notifications" and config.employee_id is None:
        print("Error: employee_id is required in the config for notifications", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.logging.level, config.logging.format, stream=sys.stderr)
    log = structlog.get_logger()
    log.info("client.config_loaded", config_path=args.config, command=args.command)

    try:
        asyncio.run(_main(config, args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
