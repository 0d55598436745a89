# reworkit/db/infra/cli_utils.py
"""
Compact CLI messages for reworkit-db.

Pattern:
 - One-line summary always printed (unless quiet).
 - Optional actionable command printed next.
 - Optional details block printed only when verbose.

Uses print() so output is captured by pytest capsys.
"""
from __future__ import annotations

from typing import Optional


def _indent(text: str, prefix: str = "  ") -> str:
    return "\n".join(prefix + line for line in text.splitlines())


def print_user_message(
    summary: str,
    action: Optional[str] = None,
    details: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> None:
    if quiet:
        return

    first_line = summary.strip().splitlines()[0] if summary else ""
    print(first_line)

    if action:
        print()
        print("Actionable:")
        for ln in action.strip().splitlines():
            print("  " + ln.rstrip())

    if verbose and details:
        print()
        print("Details:")
        print(_indent(details.strip(), prefix="  "))
