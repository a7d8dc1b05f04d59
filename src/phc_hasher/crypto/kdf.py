"""Argon2id tag derivation using the argon2-cffi bindings.

``hash_secret_raw`` cannot take a secret key or associated data, so the
derivation drives ``argon2.low_level.core`` with a full ``argon2_context``.
"""

from __future__ import annotations

import os
from typing import Any

from argon2.low_level import ARGON2_VERSION, Type, core, error_to_str, ffi, lib

from phc_hasher.errors import HashingError

VERSION = ARGON2_VERSION  # 0x13, Argon2 v1.3
SALT_LENGTH = 16
TAG_LENGTH = 32


def generate_salt(length: int = SALT_LENGTH) -> bytes:
    """Return *length* bytes from the OS CSPRNG."""

    return os.urandom(length)


def _c_buffer(data: bytes | bytearray | None) -> Any:
    if not data:
        return ffi.NULL
    buffer = ffi.new("uint8_t[]", len(data))
    ffi.memmove(buffer, data, len(data))
    return buffer


def _wipe(buffer: Any) -> None:
    if buffer is ffi.NULL:
        return
    size = ffi.sizeof(buffer)
    ffi.memmove(buffer, bytes(size), size)


def derive_tag(
    password: bytes | bytearray,
    salt: bytes,
    *,
    memory: int,
    iterations: int,
    lanes: int,
    secret: bytes | bytearray | None = None,
    associated_data: bytes | bytearray | None = None,
    tag_length: int = TAG_LENGTH,
) -> bytearray:
    """Derive an Argon2id tag of *tag_length* bytes.

    *secret* is the Argon2 ``K`` input (a pepper) and *associated_data* the
    ``X`` input. Both are optional. Raises :exc:`HashingError` when the
    reference implementation rejects the inputs, e.g. a salt shorter than
    8 bytes or less than ``8 * lanes`` KiB of memory.

    The C copies of the password, secret and tag are zeroed before
    returning. The caller owns the returned ``bytearray``.
    """

    c_out = ffi.new("uint8_t[]", tag_length)
    c_password = _c_buffer(password)
    c_salt = _c_buffer(salt)
    c_secret = _c_buffer(secret)
    c_associated_data = _c_buffer(associated_data)

    context = ffi.new(
        "argon2_context *",
        dict(
            version=VERSION,
            out=c_out,
            outlen=tag_length,
            pwd=c_password,
            pwdlen=len(password),
            salt=c_salt,
            saltlen=len(salt),
            secret=c_secret,
            secretlen=len(secret) if secret else 0,
            ad=c_associated_data,
            adlen=len(associated_data) if associated_data else 0,
            t_cost=iterations,
            m_cost=memory,
            lanes=lanes,
            threads=lanes,
            allocate_cbk=ffi.NULL,
            free_cbk=ffi.NULL,
            flags=lib.ARGON2_DEFAULT_FLAGS,
        ),
    )

    try:
        result = core(context, Type.ID.value)
        if result != lib.ARGON2_OK:
            raise HashingError(error_to_str(result))
        return bytearray(ffi.buffer(c_out, tag_length))
    finally:
        for buffer in (c_password, c_secret, c_associated_data, c_out):
            _wipe(buffer)
