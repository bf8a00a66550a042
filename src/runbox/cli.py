"""CLI entry point for runbox."""

import argparse
import logging
import sys

import runbox.io.logging_setup
import runbox.io.settings
from runbox.app.launcher import SubprocessLauncher
from runbox.tui.app import RunboxApp
from runbox.app.locators import (
    DEFAULT_COMMANDS,
    CompositeLocator,
    HttpLocator,
    PathLocator,
    StaticCommandLocator,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Keyboard-driven application launcher")
    parser.add_argument(
        "--debounce-ms",
        type=int,
        default=None,
        help="Quiet interval before a search is sent (default: 300)",
    )
    parser.add_argument(
        "--locator",
        choices=runbox.io.settings.LOCATOR_KINDS,
        default=None,
        help="Search backend: executables on $PATH or a remote HTTP locator (default: path)",
    )
    parser.add_argument(
        "--locator-url",
        type=str,
        default=None,
        help="Base URL of the HTTP locator service",
    )
    parser.add_argument(
        "--max-results", type=int, default=None, help="Maximum results per search (default: 50)"
    )
    parser.add_argument(
        "--keep-open",
        action="store_true",
        help="Stay open after launching a candidate",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Persist the given flags to settings.json and exit",
    )
    return parser


def build_locator(config: runbox.io.settings.RunboxConfig):
    """Static commands section first, then the configured search backend."""
    if config.locator == "http":
        if not config.locator_url:
            raise SystemExit("--locator http needs --locator-url (or locator_url in settings)")
        dynamic = HttpLocator(config.locator_url)
    else:
        dynamic = PathLocator(max_results=config.max_results)
    commands = StaticCommandLocator(config.commands or DEFAULT_COMMANDS)
    return CompositeLocator([commands, dynamic])


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    runtime = runbox.io.logging_setup.configure()

    overrides = {
        "debounce_ms": args.debounce_ms,
        "locator": args.locator,
        "locator_url": args.locator_url,
        "max_results": args.max_results,
        "close_on_launch": False if args.keep_open else None,
    }
    if args.save:
        runbox.io.settings.update_settings(overrides)
        print(f"saved {runbox.io.settings.get_config_path()}")
        return 0

    config = runbox.io.settings.load_config(overrides)
    logger.info("runbox starting: %s (log: %s)", config, runtime.file_path)

    app = RunboxApp(build_locator(config), SubprocessLauncher(), config)
    launched = app.run()
    if launched is not None:
        logger.info("launched %r", launched)
    return 0


if __name__ == "__main__":
    sys.exit(main())
