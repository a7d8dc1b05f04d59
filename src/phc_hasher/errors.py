"""Custom exceptions for phc-hasher."""


class PhcHasherError(Exception):
    """Base exception for phc-hasher."""


class InvalidArgumentError(PhcHasherError, ValueError):
    """Caller passed an empty password, hash, pepper or associated data, or a bad configuration."""


class InvalidHashError(PhcHasherError):
    """String is not a PHC-formatted Argon2id hash."""


class HashingError(PhcHasherError):
    """Argon2id rejected its inputs."""
