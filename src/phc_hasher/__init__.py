"""Argon2id password hashing in the PHC string format."""

from importlib.metadata import PackageNotFoundError, version

from phc_hasher.config import (
    DEFAULT_CONFIGURATION,
    FIRST_RECOMMENDED,
    PRESETS,
    SECOND_RECOMMENDED,
    Argon2idConfiguration,
    get_preset,
    resolve_configuration,
)
from phc_hasher.errors import HashingError, InvalidArgumentError, InvalidHashError, PhcHasherError
from phc_hasher.hasher import (
    Argon2idHasher,
    PhcHash,
    hash_password,
    needs_rehash,
    parse_hash,
    verify_password,
)

__all__ = [
    "Argon2idConfiguration",
    "Argon2idHasher",
    "DEFAULT_CONFIGURATION",
    "FIRST_RECOMMENDED",
    "HashingError",
    "InvalidArgumentError",
    "InvalidHashError",
    "PRESETS",
    "PhcHash",
    "PhcHasherError",
    "SECOND_RECOMMENDED",
    "__version__",
    "get_preset",
    "hash_password",
    "needs_rehash",
    "parse_hash",
    "resolve_configuration",
    "verify_password",
]

try:
    __version__ = version("phc-hasher")
except PackageNotFoundError:  # pragma: no cover - happens only from source checkout
    __version__ = "0.0.0-dev"
