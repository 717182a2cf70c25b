"""Orchestrator CLI, dispatches to sub-CLIs.

Sub-commands:
  switchctrl  VLAN provisioning on Juniper EX / Dell PowerConnect switches
  refs        SNMP interface-index reference tables

Examples:
  vlsrctl switchctrl --model powerconnect6248 --host 10.0.0.3 \\
      --username admin --password <PW> port untagged 1/0/12 200

  vlsrctl refs 10.0.0.2 public --ports
"""

from __future__ import annotations

import os
import sys
from importlib import import_module

from tabulate import tabulate

from vlsrctl import __version__, configure_logging, glogger

COMMANDS = {
    "switchctrl": ("vlsrctl.switchctrl.cli", "Switch VLAN provisioning"),
    "refs": ("vlsrctl.idresolve.cli", "Interface-index reference tables"),
}


def _usage() -> str:
    rows = [[cmd, desc] for cmd, (_, desc) in COMMANDS.items()]
    return (
        "usage: vlsrctl <command> [options]\n\nAvailable commands:\n"
        + tabulate(rows, tablefmt="plain")
        + "\n\nRun 'vlsrctl <command> --help' for command-specific options."
    )


def _framed(title: str, table: str) -> str:
    """Put a title bar on top of a ``mixed_grid`` table."""
    top, *body = table.splitlines()
    width = len(top)
    header = [
        "┍" + "━" * (width - 2) + "┑",
        "│ " + title.center(width - 4) + " │",
        top.translate(str.maketrans({"┍": "┝", "┑": "┥", "┯": "┿"})),
    ]
    return "\n".join(header + body)


def _print_startup_banner() -> None:
    rows = [
        ["version", __version__],
        ["python", sys.version.split()[0]],
        ["log level", os.getenv("LOGURU_LEVEL", "DEBUG")],
    ]
    rows += [[var, os.environ[var]] for var in ("VLSR_SITE", "BUILDTIME") if os.environ.get(var)]

    banner = _framed("vlsrctl starting up", tabulate(rows, tablefmt="mixed_grid"))
    glogger.opt(raw=True).info("\n{}\n", banner)


def main() -> None:
    """Main entry point: dispatch to sub-CLI."""
    configure_logging()
    _print_startup_banner()

    argv = sys.argv[1:]
    if not argv or argv[0] in ("-h", "--help"):
        print(_usage())
        sys.exit(0 if argv else 1)

    command, *rest = argv
    if command not in COMMANDS:
        print(f"vlsrctl: unknown command '{command}'\n", file=sys.stderr)
        print(_usage(), file=sys.stderr)
        sys.exit(1)

    module_path, _ = COMMANDS[command]
    import_module(module_path).main(rest)


if __name__ == "__main__":
    main()
