# reworkit/db/infra/sql_utils.py
"""
SQL identifier quoting for the PRAGMA statements used by schema inspection.

PRAGMA arguments cannot be bound as parameters, so table and index names are
quoted with SQL double quotes, embedded double quotes doubled.
"""
from __future__ import annotations


def validate_identifier(name: str) -> None:
    """
    Reject identifiers that are not strings, are empty, or carry NUL/newline
    characters. Raises TypeError/ValueError.
    """
    if not isinstance(name, str):
        raise TypeError("Identifier must be a string")
    if not name:
        raise ValueError("Identifier must not be empty")
    if "\x00" in name or "\n" in name or "\r" in name:
        raise ValueError("Identifier contains disallowed control characters")


def quote_ident(name: str) -> str:
    """
    quote_ident('build_result') -> '"build_result"'
    quote_ident('we"ird') -> '"we""ird"'
    """
    validate_identifier(name)
    return '"' + name.replace('"', '""') + '"'
