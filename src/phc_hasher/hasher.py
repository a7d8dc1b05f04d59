"""Argon2id password hashing in the PHC string format.

Hashes look like::

    $argon2id$v=19$m=65536,t=3,p=4$<base64 salt>$<base64 tag>

The salt is 16 random bytes and the tag 32 bytes, both standard base64
with padding. Parsing also accepts the unpadded form other Argon2
libraries emit.

:func:`verify_password` never raises for a malformed hash. A string that
fails to parse is reported exactly like a wrong password, so callers
cannot be used as an oracle on the stored format.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field

from phc_hasher.config import (
    DEFAULT_CONFIGURATION,
    Argon2idConfiguration,
    format_configuration,
    parse_configuration,
    split_fields,
    validate_int_parameter,
)
from phc_hasher.crypto.compare import constant_time_equals
from phc_hasher.crypto.kdf import SALT_LENGTH, TAG_LENGTH, VERSION, derive_tag, generate_salt
from phc_hasher.crypto.secure_memory import encoded_secret, secure_zeroize
from phc_hasher.errors import HashingError, InvalidArgumentError, InvalidHashError

logger = logging.getLogger(__name__)

ALGORITHM_NAME = "argon2id"
HASH_PARTS_SEPARATOR = "$"
VERSION_PREFIX = "v="


@dataclass(frozen=True)
class PhcHash:
    """A parsed Argon2id PHC string."""

    configuration: Argon2idConfiguration
    salt: bytes = field(repr=False)
    tag: bytes = field(repr=False)
    version: int = VERSION

    def to_string(self) -> str:
        return format_hash(self.configuration, self.salt, self.tag)


def _require_text(name: str, value: object) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidArgumentError(f"{name} must be a non-empty string")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidArgumentError(f"{name} is not valid Unicode text") from exc
    return value


def _require_optional_text(name: str, value: object) -> str | None:
    # None means "not used"; an empty string is almost always a caller bug.
    if value is None:
        return None
    return _require_text(name, value)


def _require_hash(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError("hash must be a non-blank string")
    return value


def _require_configuration(value: object) -> Argon2idConfiguration:
    if value is None:
        return DEFAULT_CONFIGURATION
    if not isinstance(value, Argon2idConfiguration):
        raise InvalidArgumentError(
            f"configuration must be an Argon2idConfiguration, got {type(value).__name__}",
        )
    return value


def _b64encode(data: bytes | bytearray) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(value: str, what: str) -> bytes:
    padded = value + "=" * (-len(value) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidHashError(f"{what} is not valid base64") from exc


def format_hash(configuration: Argon2idConfiguration, salt: bytes | bytearray, tag: bytes | bytearray) -> str:
    """Assemble a PHC string from its parts."""
    parts = [
        ALGORITHM_NAME,
        f"{VERSION_PREFIX}{VERSION}",
        format_configuration(configuration),
        _b64encode(salt),
        _b64encode(tag),
    ]
    return HASH_PARTS_SEPARATOR + HASH_PARTS_SEPARATOR.join(parts)


def parse_hash(encoded: str) -> PhcHash:
    """Parse a PHC-formatted Argon2id hash.

    Checks run in order and stop at the first failure: five ``$``-separated
    fields, the ``argon2id`` identifier (any case), version 19, the
    ``m=,t=,p=`` parameters and finally base64 salt and tag. Raises
    :exc:`InvalidHashError` describing the failed check.
    """
    fields = split_fields(encoded, HASH_PARTS_SEPARATOR)
    if len(fields) != 5:
        raise InvalidHashError(f"expected 5 fields, got {len(fields)}")

    algorithm, version_field, parameters, salt_field, tag_field = fields
    if algorithm.lower() != ALGORITHM_NAME:
        raise InvalidHashError("algorithm is not argon2id")

    version = validate_int_parameter(version_field, VERSION_PREFIX)
    if version != VERSION:
        raise InvalidHashError(f"unsupported version {version}")

    configuration = parse_configuration(parameters)
    salt = _b64decode(salt_field, "salt")
    tag = _b64decode(tag_field, "tag")
    return PhcHash(configuration=configuration, salt=salt, tag=tag, version=version)


def _derive(
    password: str,
    configuration: Argon2idConfiguration,
    salt: bytes,
    pepper: str | None,
    associated_data: str | None,
) -> bytearray:
    with encoded_secret(password) as password_bytes:
        with encoded_secret(pepper) as secret, encoded_secret(associated_data) as ad:
            return derive_tag(
                password_bytes,
                salt,
                memory=configuration.memory,
                iterations=configuration.iterations,
                lanes=configuration.lanes,
                secret=secret,
                associated_data=ad,
                tag_length=TAG_LENGTH,
            )


def hash_password(
    password: str,
    pepper: str | None = None,
    associated_data: str | None = None,
    configuration: Argon2idConfiguration | None = None,
) -> str:
    """Hash *password* with Argon2id and a fresh random salt.

    *pepper* is an application secret kept outside the stored hash and
    *associated_data* binds the hash to a usage context. Both must be
    supplied again, unchanged, to :func:`verify_password`. *configuration*
    defaults to :data:`~phc_hasher.config.SECOND_RECOMMENDED`.

    Raises :exc:`InvalidArgumentError` for an empty password or an empty
    (but not ``None``) pepper or associated data, and :exc:`HashingError`
    when Argon2id rejects the configuration.
    """
    _require_text("password", password)
    _require_optional_text("pepper", pepper)
    _require_optional_text("associated_data", associated_data)
    configuration = _require_configuration(configuration)

    salt = generate_salt(SALT_LENGTH)
    tag = _derive(password, configuration, salt, pepper, associated_data)
    try:
        return format_hash(configuration, salt, tag)
    finally:
        secure_zeroize(tag)


def verify_password(
    password: str,
    hash: str,
    pepper: str | None = None,
    associated_data: str | None = None,
) -> bool:
    """Check *password* against a hash produced by :func:`hash_password`.

    Returns ``False`` for a wrong password, a different pepper or
    associated data, and for any string that is not a valid Argon2id PHC
    hash. Raises :exc:`InvalidArgumentError` only for an empty password,
    a blank hash or an empty pepper or associated data.
    """
    _require_text("password", password)
    encoded = _require_hash(hash)
    _require_optional_text("pepper", pepper)
    _require_optional_text("associated_data", associated_data)

    try:
        parsed = parse_hash(encoded)
    except InvalidHashError as exc:
        logger.debug("Rejecting hash: %s", exc)
        return False

    try:
        computed = _derive(password, parsed.configuration, parsed.salt, pepper, associated_data)
    except HashingError as exc:
        logger.debug("Argon2id rejected stored parameters: %s", exc)
        return False

    try:
        return constant_time_equals(computed, parsed.tag)
    finally:
        secure_zeroize(computed)


def needs_rehash(hash: str, configuration: Argon2idConfiguration | None = None) -> bool:
    """Return True if *hash* should be recomputed under *configuration*.

    That is the case when it does not parse, was made with other cost
    parameters, or uses a salt or tag length this library does not emit.
    """
    encoded = _require_hash(hash)
    target = _require_configuration(configuration)
    try:
        parsed = parse_hash(encoded)
    except InvalidHashError:
        return True
    return (
        parsed.configuration != target
        or len(parsed.salt) != SALT_LENGTH
        or len(parsed.tag) != TAG_LENGTH
    )


@dataclass(frozen=True)
class Argon2idHasher:
    """Hashing policy shared by an application.

    Bundles a configuration with an optional pepper and associated data so
    they are not repeated at every call site::

        hasher = Argon2idHasher(pepper=settings.password_pepper)
        stored = hasher.hash("hunter2")
        hasher.verify("hunter2", stored)

    Instances are immutable and safe to share between threads.
    """

    configuration: Argon2idConfiguration = DEFAULT_CONFIGURATION
    pepper: str | None = field(default=None, repr=False)
    associated_data: str | None = None

    def __post_init__(self) -> None:
        _require_configuration(self.configuration)
        _require_optional_text("pepper", self.pepper)
        _require_optional_text("associated_data", self.associated_data)

    def hash(self, password: str) -> str:
        return hash_password(password, self.pepper, self.associated_data, self.configuration)

    def verify(self, password: str, hash: str) -> bool:
        return verify_password(password, hash, self.pepper, self.associated_data)

    def needs_rehash(self, hash: str) -> bool:
        return needs_rehash(hash, self.configuration)


__all__ = [
    "ALGORITHM_NAME",
    "Argon2idHasher",
    "HASH_PARTS_SEPARATOR",
    "PhcHash",
    "VERSION_PREFIX",
    "format_hash",
    "hash_password",
    "needs_rehash",
    "parse_hash",
    "verify_password",
]
