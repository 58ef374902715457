"""Subcommand handlers.

Each module exposes ``register(subparsers)``, which adds its parser and binds
``handler(args, settings, console) -> int`` through ``set_defaults``.
"""

from __future__ import annotations

from . import atlas, doctor, init, install, sync, uninstall

COMMAND_MODULES = (init, atlas, install, uninstall, doctor, sync)


def register_all(subparsers) -> None:
    for module in COMMAND_MODULES:
        module.register(subparsers)


__all__ = ["COMMAND_MODULES", "register_all"]
