"""Argon2id cost parameters and their PHC parameter fragment.

The fragment always reads ``m=<memory>,t=<iterations>,p=<lanes>``. The
order is fixed by the PHC Argon2 encoding, so a fragment with the same
fields in a different order is rejected rather than reordered.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from phc_hasher.errors import InvalidArgumentError, InvalidHashError

PARAMETER_SEPARATOR = ","
PARAMETER_KV_SEPARATOR = "="
MEMORY_PREFIX = f"m{PARAMETER_KV_SEPARATOR}"
ITERATIONS_PREFIX = f"t{PARAMETER_KV_SEPARATOR}"
LANES_PREFIX = f"p{PARAMETER_KV_SEPARATOR}"

# Argon2 cost fields are uint32 in the reference implementation.
MAX_PARAMETER_VALUE = 2**32 - 1

_DIGITS = re.compile(r"[0-9]+")
_MAX_DIGITS = len(str(MAX_PARAMETER_VALUE))


@dataclass(frozen=True)
class Argon2idConfiguration:
    """Argon2id cost parameters.

    ``memory`` is in KiB, ``iterations`` is the time cost and ``lanes`` the
    degree of parallelism. All three must be positive integers.
    """

    memory: int
    iterations: int
    lanes: int

    def __post_init__(self) -> None:
        for name in ("memory", "iterations", "lanes"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidArgumentError(f"{name} must be an integer, got {type(value).__name__}")
            if not 0 < value <= MAX_PARAMETER_VALUE:
                raise InvalidArgumentError(
                    f"{name} must be between 1 and {MAX_PARAMETER_VALUE}, got {value}",
                )

    def to_phc(self) -> str:
        return format_configuration(self)

    @classmethod
    def from_phc(cls, fragment: str) -> Argon2idConfiguration:
        return parse_configuration(fragment)


# RFC 9106, section 4: first recommended option, 2 GiB of memory.
FIRST_RECOMMENDED = Argon2idConfiguration(memory=2048 * 1024, iterations=1, lanes=4)

# RFC 9106, section 4: second recommended option for memory-constrained hosts.
SECOND_RECOMMENDED = Argon2idConfiguration(memory=64 * 1024, iterations=3, lanes=4)

DEFAULT_CONFIGURATION = SECOND_RECOMMENDED
DEFAULT_PRESET_NAME = "second-recommended"

PRESETS: Mapping[str, Argon2idConfiguration] = MappingProxyType(
    {
        "first-recommended": FIRST_RECOMMENDED,
        "second-recommended": SECOND_RECOMMENDED,
    }
)


def split_fields(source: str, separator: str) -> list[str]:
    """Split *source* on *separator*, dropping empty entries."""
    return [part for part in source.split(separator) if part]


def validate_int_parameter(raw: str, prefix: str) -> int:
    """Return the positive integer stored in ``<prefix><digits>``.

    The prefix match is case-sensitive and the value must be plain ASCII
    digits: no sign, whitespace or digit separators. Raises
    :exc:`InvalidHashError` for anything else, including zero.
    """
    if not raw.startswith(prefix):
        raise InvalidHashError(f"expected a field starting with {prefix!r}")

    digits = raw[len(prefix) :]
    if not _DIGITS.fullmatch(digits):
        raise InvalidHashError(f"{prefix!r} value is not a base-10 integer")
    if len(digits.lstrip("0")) > _MAX_DIGITS:
        raise InvalidHashError(f"{prefix!r} value is out of range")

    value = int(digits)
    if not 0 < value <= MAX_PARAMETER_VALUE:
        raise InvalidHashError(f"{prefix!r} value must be between 1 and {MAX_PARAMETER_VALUE}")
    return value


def parse_configuration(fragment: str) -> Argon2idConfiguration:
    """Parse an ``m=..,t=..,p=..`` fragment, failing on the first bad field."""
    fields = split_fields(fragment, PARAMETER_SEPARATOR)
    if len(fields) != 3:
        raise InvalidHashError(f"parameters must have 3 fields, got {len(fields)}")

    memory_field, iterations_field, lanes_field = fields
    memory = validate_int_parameter(memory_field, MEMORY_PREFIX)
    iterations = validate_int_parameter(iterations_field, ITERATIONS_PREFIX)
    lanes = validate_int_parameter(lanes_field, LANES_PREFIX)
    return Argon2idConfiguration(memory=memory, iterations=iterations, lanes=lanes)


def format_configuration(configuration: Argon2idConfiguration) -> str:
    return PARAMETER_SEPARATOR.join(
        [
            f"{MEMORY_PREFIX}{configuration.memory}",
            f"{ITERATIONS_PREFIX}{configuration.iterations}",
            f"{LANES_PREFIX}{configuration.lanes}",
        ]
    )


def get_preset(name: str) -> Argon2idConfiguration:
    """Look up a named preset such as ``"second-recommended"``."""
    try:
        return PRESETS[name.lower()]
    except KeyError:
        known = ", ".join(sorted(PRESETS))
        raise InvalidArgumentError(f"Unknown preset {name!r} (expected one of: {known})") from None


def resolve_configuration(
    *,
    memory: int | None = None,
    iterations: int | None = None,
    lanes: int | None = None,
    base: Argon2idConfiguration | None = None,
) -> Argon2idConfiguration:
    """Build a validated configuration using overrides when provided."""
    defaults = base or DEFAULT_CONFIGURATION
    return Argon2idConfiguration(
        memory=memory if memory is not None else defaults.memory,
        iterations=iterations if iterations is not None else defaults.iterations,
        lanes=lanes if lanes is not None else defaults.lanes,
    )


__all__ = [
    "Argon2idConfiguration",
    "DEFAULT_CONFIGURATION",
    "DEFAULT_PRESET_NAME",
    "FIRST_RECOMMENDED",
    "ITERATIONS_PREFIX",
    "LANES_PREFIX",
    "MAX_PARAMETER_VALUE",
    "MEMORY_PREFIX",
    "PARAMETER_SEPARATOR",
    "PRESETS",
    "SECOND_RECOMMENDED",
    "format_configuration",
    "get_preset",
    "parse_configuration",
    "resolve_configuration",
    "split_fields",
    "validate_int_parameter",
]
