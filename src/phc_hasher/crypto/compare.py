"""Timing-safe comparison of derived tags."""

from __future__ import annotations

import hmac


def constant_time_equals(left: bytes | bytearray, right: bytes | bytearray) -> bool:
    """Return True if *left* and *right* hold the same bytes.

    ``hmac.compare_digest`` returns early when the lengths differ, so both
    inputs are padded to a common width first and the length check is
    folded in afterwards. Running time depends only on the longer input.
    """

    width = max(len(left), len(right))
    same_length = len(left) == len(right)
    same_bytes = hmac.compare_digest(left.ljust(width, b"\x00"), right.ljust(width, b"\x00"))
    return same_length & same_bytes
