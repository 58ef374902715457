"""Command-line front door for based-claude.

Parses global options, resolves ``Settings`` once, configures logging, and
dispatches to the subcommand handler bound by argparse. Whole-command errors
become an ``ERROR`` line and exit status 1.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .commands import register_all
from .console import Console
from .errors import BasedClaudeError
from .settings import APP_NAME, SDK_VERSION, load_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
EXIT_INTERRUPTED = 130

logger = logging.getLogger(__name__)


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Scaffold and maintain grep-friendly memory and atlas files for coding agents.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {SDK_VERSION}")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors even on a TTY.")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)
    register_all(subparsers)
    return parser


def main(
    argv: list[str] | None = None,
    environ: dict[str, str] | None = None,
    cwd: Path | None = None,
    stdout=None,
    stderr=None,
) -> int:
    """Parse ``argv`` and run one subcommand; return the process exit status.

    ``environ``, ``cwd`` and the output streams default to the real process
    values and exist so tests can run commands in isolation.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    out = stdout if stdout is not None else sys.stdout
    settings = load_settings(environ=environ, no_color=args.no_color, cwd=cwd, stream=out)
    _setup_logging(settings.debug)
    console = Console(color=settings.color, stdout=stdout, stderr=stderr)
    logger.debug("settings: %s", settings)

    try:
        return int(args.handler(args, settings, console))
    except KeyboardInterrupt:
        console.error("Interrupted")
        return EXIT_INTERRUPTED
    except BasedClaudeError as exc:
        console.error(str(exc))
        return 1
    except OSError as exc:
        logger.debug("command failed", exc_info=True)
        console.error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
