"""Application entry point for the slack-github-issues bot."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional

from art import tprint
from dotenv import load_dotenv
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler
from slack_bolt.async_app import AsyncApp

import settings
from adapters.slack_listener import ReactionListener
from adapters.slack_client import SlackClient
from client import (
    REDACTION_MASK,
    Credentials,
    build_app,
    build_github_client,
    build_slack_client,
    load_credentials,
    secret_values,
)
from core.config import IssuesConfig
from core.processor import ReactionProcessor

NAME = "ISSUES"
FONT = "tarty-1"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_PATH = os.path.join("logs", "slack-github-issues.log")


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _MaskingFormatter(logging.Formatter):
    """Formats records, then masks every known secret in the output."""

    def __init__(self, secrets: Iterable[str]) -> None:
        super().__init__(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
        self._secrets = tuple(secrets)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, REDACTION_MASK)
        return message


def _rotating_file_handler(file_cfg: dict) -> RotatingFileHandler:
    path = file_cfg.get("path") or DEFAULT_LOG_PATH
    if not os.path.isabs(path):
        path = os.path.join(settings.PROJECT_ROOT, path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def _configure_logging(config: Optional[dict] = None) -> None:
    """Install console and rotating file handlers from the ``logging`` section."""

    config = config or {}
    if not config.get("enabled", True):
        return

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())
    file_cfg = config.get("file") or {}
    if file_cfg.get("enabled", False):
        handlers.append(_rotating_file_handler(file_cfg))
    if not handlers:
        return

    # Tokens may live only in .env; load them so they can be masked.
    load_dotenv()
    formatter = _MaskingFormatter(secret_values(config.get("redact")))
    level = logging.getLevelName(str(config.get("level", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers, force=True)


def _build(config: IssuesConfig, credentials: Credentials) -> tuple[ReactionProcessor, SlackClient, AsyncApp]:
    """Wire the processor, its listener and the Bolt app from config."""

    slack_client = build_slack_client(config, credentials)
    github_client = build_github_client(config, credentials)
    processor = ReactionProcessor(config, slack_client, github_client)
    listener = ReactionListener(processor, slack_client)
    app = build_app(slack_client)
    listener.register(app)
    return processor, slack_client, app


async def _serve(config: IssuesConfig) -> None:
    logger = logging.getLogger(__name__)
    credentials = load_credentials()
    processor, slack_client, app = _build(config, credentials)
    # Channel names must be known before the first reaction arrives.
    await slack_client.refresh()
    logger.info("%s rules are loaded", len(processor.rules))

    handler = AsyncSocketModeHandler(app, credentials.slack_app_token)
    logger.info("Connecting to Slack. Listening for reactions...")
    await handler.start_async()


def _run(config_path: Optional[str]) -> int:
    _print_banner()
    # Log to the console until the config's own logging section is known.
    _configure_logging()
    logger = logging.getLogger(__name__)

    try:
        config = settings.load_config(config_path)
    except settings.ConfigurationError as err:
        logger.error("reaction listener registration failed: %s", err)
        return 1

    _configure_logging(config.logging)
    logger.info("Starting slack-github-issues")
    try:
        asyncio.run(_serve(config))
    except KeyboardInterrupt:
        logger.info("Shutting down")
    return 0


def _check_config(config_path: Optional[str]) -> int:
    try:
        config = settings.load_config(config_path)
    except settings.ConfigurationError as err:
        print(err, file=sys.stderr)
        return 1

    print(f"Configuration OK: {len(config.rules)} rules, success reaction :{config.success_reaction}:")
    for index, rule in enumerate(config.rules):
        print(f"{index}. {rule}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="slack-github-issues")
    parser.add_argument(
        "--config",
        dest="config_path",
        help=f"Path to the JSON config (default: ${settings.CONFIG_PATH_ENV} or {settings.DEFAULT_CONFIG_PATH})",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the bot")
    subparsers.add_parser("check-config", help="Validate the config file and list its rules")

    args = parser.parse_args(argv)
    if args.command == "check-config":
        return _check_config(args.config_path)
    return _run(args.config_path)


if __name__ == "__main__":
    sys.exit(main())
