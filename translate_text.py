"""Console front end for the chat translator.

Translates a text, detects its language, prints usage statistics or clears stored data, using
the same configuration file and data directory as the desktop application.

Examples:
    python translate_text.py translate "Hello" --target zh-CN --engine google
    python translate_text.py detect "こんにちは"
    python translate_text.py stats
    python translate_text.py clear --account work
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Final, NoReturn

from config.loader import ConfigLoader, ConfigLoaderError
from core.service import TranslationService
from core.trans.interface import TranslateExceptionError
from core.version import VERSION
from utils.file_utils import FileUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    from models.config_models import Config
    from models.translation_models import TranslationResult

CFG_FILE: Final[str] = "translator.ini"


def check_python_version() -> None:
    """Check if Python version is 3.12 or later.

    Raises:
        RuntimeError: If Python version is below 3.12.
    """
    if sys.version_info < (3, 12):
        msg = "Python 3.12 or later is required"
        raise RuntimeError(msg)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    parser = _ArgumentParser(
        description=f"Chat translator console (version {VERSION})",
        epilog='Example: python translate_text.py translate "Hello" --target zh-CN',
    )
    parser.add_argument("--config", dest="config_file", default=CFG_FILE, help="Configuration file")
    parser.add_argument("--debug", dest="debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--engine", dest="engine", metavar="ENGINE", help="Override the default engine")
    sub = parser.add_subparsers(dest="command", required=True)

    translate = sub.add_parser("translate", help="Translate a text")
    translate.add_argument("text")
    translate.add_argument("--source", dest="source_lang", metavar="LANG")
    translate.add_argument("--target", dest="target_lang", metavar="LANG")
    translate.add_argument("--style", dest="style")
    translate.add_argument("--account", dest="account_id")

    detect = sub.add_parser("detect", help="Detect the language of a text")
    detect.add_argument("text")

    sub.add_parser("stats", help="Print usage statistics")
    sub.add_parser("engines", help="List the registered engines")

    clear = sub.add_parser("clear", help="Clear cached translations and statistics")
    clear.add_argument("--account", dest="account_id", help="Clear only the data of one account")

    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    """Load configuration file and apply CLI overrides.

    Raises:
        ConfigLoaderError: If configuration file cannot be loaded.
    """
    script_name: str = Path(sys.argv[0]).stem
    return ConfigLoader(
        config_filename=args.config_file, script_name=script_name, debug=args.debug, engine=args.engine
    ).config


def setup_logging(config: Config) -> None:
    log_file: Path = FileUtils.resolve_data_path(config.GENERAL.DATA_DIR, config.GENERAL.LOG_FILE)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger_utils = LoggerUtils(log_file)
    logger_utils.set_level("DEBUG" if config.GENERAL.DEBUG else config.GENERAL.LOG_LEVEL)  # type: ignore[arg-type]


async def run_command(service: TranslationService, args: argparse.Namespace) -> int:
    """Execute one subcommand and print its outcome.

    Returns:
        int: Process exit code.
    """
    match args.command:
        case "translate":
            options: dict[str, str] = {"style": args.style} if args.style else {}
            result: TranslationResult = await service.translate(
                args.text,
                source_lang=args.source_lang,
                target_lang=args.target_lang,
                engine=args.engine,
                options=options,
                account_id=args.account_id,
            )
            print(result.translated_text)
            print(
                f"[engine: {result.engine_used}, detected: {result.detected_lang}, cached: {result.cached}]",
                file=sys.stderr,
            )
        case "detect":
            print(await service.detect_language(args.text))
        case "stats":
            print(json.dumps(await service.get_stats(), ensure_ascii=False, indent=2))
        case "engines":
            for engine in service.get_engines():
                state: str = "available" if engine["available"] else "unavailable"
                print(f"{engine['name']:<10} {engine['display_name']:<20} {state}")
        case "clear":
            summary = await service.clear_all_user_data(args.account_id)
            print(json.dumps(summary, ensure_ascii=False))
        case _:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return 2
    return 0


async def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Performs the following steps:
    1. Check Python version
    2. Parse command-line arguments
    3. Load configuration and set up logging
    4. Start the translation service and run the command
    5. Shut the service down
    """
    check_python_version()
    args: argparse.Namespace = parse_arguments(argv)
    try:
        config: Config = load_config(args)
    except ConfigLoaderError as err:
        print("\nError: Failed to load configuration file.", file=sys.stderr)
        print(f"Details: {err}", file=sys.stderr)
        return 1

    setup_logging(config)
    service = TranslationService(config)
    await service.async_init(start_maintenance=False)
    try:
        return await run_command(service, args)
    except TranslateExceptionError as err:
        print(f"\nError: {err.safe_message}", file=sys.stderr)
        return 1
    finally:
        await service.shutdown()


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\n\nCancelled by user.", file=sys.stderr)
        sys.exit(130)
