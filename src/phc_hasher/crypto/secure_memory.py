"""Scoped buffers for secret inputs.

Passwords, peppers and associated data are encoded into ``bytearray``
objects that are zeroed when the hash or verify call ends, as are derived
tags. This is best-effort: the interpreter may still hold copies of the
original ``str`` objects.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator


def secure_zeroize(data: bytearray | None) -> None:
    """Zero a bytearray in-place."""
    if data is None:
        return
    length = len(data)
    for i in range(length):
        data[i] = 0
    # Read back to create a data dependency the optimizer can't remove
    if length > 0:
        _ = data[0]


@contextmanager
def encoded_secret(value: str | None) -> Iterator[bytearray | None]:
    """Yield *value* UTF-8 encoded in a bytearray that is zeroed on exit.

    ``None`` passes through unchanged.
    """
    if value is None:
        yield None
        return

    buffer = bytearray(value.encode("utf-8"))
    try:
        yield buffer
    finally:
        secure_zeroize(buffer)
