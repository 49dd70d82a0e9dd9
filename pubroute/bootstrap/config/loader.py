import argparse
import os
from functools import lru_cache
from pathlib import Path


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to a pubroute configuration file"
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        default="INFO",
        choices=LOG_LEVELS,
        help=(
            "Logging verbosity.\n"
            "Choose among: DEBUG, INFO, WARNING, ERROR, CRITICAL.\n\n"
            "DEBUG    → every decoded event and dispatch outcome.\n"
            "INFO     → subscription and lifecycle changes (default).\n"
            "WARNING  → dropped messages and connection problems.\n"
            "ERROR    → unresolved events and failing processors.\n"
            "CRITICAL → only critical failures.\n\n"
            "Example:\n"
            "  --log-level DEBUG"
        ),
    )


@lru_cache
def get_cli_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pubroute",
        description=(
            "Start a pubroute worker.\n\n"
            "The worker subscribes to one Redis pub/sub channel and routes every\n"
            "event notification to the processor registered for its type."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )
    add_common_arguments(parser)
    return parser.parse_args()


def resolve_configfile(raw: str | None) -> Path:
    # Priority: CLI > ENV > default file in current working directory
    raw = raw or os.getenv("PUBROUTECONFIG")

    if raw is None:
        file = Path.cwd() / "pubroute.yaml"
    else:
        file = Path(raw)

    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            "  - Or set the PUBROUTECONFIG environment variable\n"
            "  - Or place a 'pubroute.yaml' file in the current working directory."
        )

    return file


@lru_cache
def get_configfile() -> Path:
    return resolve_configfile(get_cli_args().config)
