"""Parsing of the operator-supplied search attribute list."""

from __future__ import annotations

from typing import List


def parse_attributes_list(attributes_list: str) -> List[str]:
    """Split a space separated attribute string into attribute names.

    Order and duplicates are preserved. Runs of spaces count as a single
    separator, so an empty or all-space string yields an empty list.

    Examples:
        >>> parse_attributes_list("cn dn")
        ['cn', 'dn']
        >>> parse_attributes_list("  cn   dn  ")
        ['cn', 'dn']
    """
    return [attribute for attribute in attributes_list.split(" ") if attribute]


__all__ = ["parse_attributes_list"]
