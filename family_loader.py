"""Hash family selection and constant-table loading.

Each supported family ships three resources in the ``sha_families`` package:

- ``<FAMILY>.properties``: ``key=value`` structural parameters.
- ``<FAMILY>.initial-hash-values``: one literal per line.
- ``<FAMILY>.round-constants``: comma-separated literals.

Literals are written in the base given by ``number-base-of-data``. The loader
validates everything before a `FamilyDescriptor` is handed to the digest
engine, so the engine itself never has to deal with malformed tables.
"""

from __future__ import annotations

import enum
import logging
import os
import threading
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from sha_exceptions import MalformedDescriptor, UnsupportedFamily


logger = logging.getLogger(__name__)

RESOURCE_DIR_ENV = "SHA_FAMILIES_DIR"

_PROPERTY_KEYS = {
    "word-size": "word_size",
    "number-base-of-data": "number_base",
    "number-of-initial-hash-values": "hash_value_count",
    "number-of-round-constants": "round_constant_count",
    "number-of-rounds": "rounds",
    "block-size": "block_size",
    "length-field-width": "length_field_width",
}


class Family(enum.Enum):
    SHA1 = "SHA-1"
    SHA2_64 = "SHA-2"

    @property
    def word_size(self) -> int:
        """Word width in bytes fixed by the family's round functions."""
        return 4 if self is Family.SHA1 else 8


_ALIASES = {
    "SHA-1": Family.SHA1,
    "SHA1": Family.SHA1,
    "SHA-2": Family.SHA2_64,
    "SHA2": Family.SHA2_64,
    "SHA-512": Family.SHA2_64,
    "SHA512": Family.SHA2_64,
}


def resolve_family(family: Union[Family, str]) -> Family:
    """Map a family enumerant or name onto `Family`.

    Names are matched case-insensitively ("sha-1", "SHA-512", ...).
    """
    if isinstance(family, Family):
        return family
    if isinstance(family, str):
        resolved = _ALIASES.get(family.strip().upper())
        if resolved is not None:
            return resolved
    raise UnsupportedFamily(family)


@dataclass(frozen=True)
class FamilyDescriptor:
    """Immutable constants and structural parameters of one hash family."""

    family: Family
    word_size: int
    number_base: int
    hash_value_count: int
    round_constant_count: int
    rounds: int
    block_size: int
    length_field_width: int
    initial_hash_values: Tuple[int, ...]
    round_constants: Tuple[int, ...]

    @property
    def word_bits(self) -> int:
        return self.word_size * 8

    @property
    def word_mask(self) -> int:
        return (1 << self.word_bits) - 1

    @property
    def schedule_copy_count(self) -> int:
        """Number of schedule words copied straight out of each block."""
        return self.block_size // self.word_size

    @property
    def digest_size(self) -> int:
        return self.word_size * self.hash_value_count

    @property
    def hex_length(self) -> int:
        return 2 * self.digest_size

    def validate(self) -> "FamilyDescriptor":
        """Check the structural invariants, raising `MalformedDescriptor`."""
        name = self.family.value

        def fail(reason: str):
            raise MalformedDescriptor(name, reason)

        if self.word_size != self.family.word_size:
            fail(f"word size {self.word_size} does not match family word size {self.family.word_size}")
        if not 2 <= self.number_base <= 36:
            fail(f"number base {self.number_base} is outside 2..36")
        if self.block_size <= 0 or self.block_size % self.word_size != 0:
            fail(f"block size {self.block_size} is not a positive multiple of word size {self.word_size}")
        if self.rounds < self.schedule_copy_count:
            fail(f"{self.rounds} rounds cannot hold the {self.schedule_copy_count} words of a block")
        if not 0 < self.length_field_width < self.block_size:
            fail(f"length field width {self.length_field_width} does not fit in a {self.block_size}-byte block")

        if self.family is Family.SHA1:
            if self.hash_value_count != 5:
                fail(f"SHA-1 needs 5 hash values, got {self.hash_value_count}")
            if self.round_constant_count != 4:
                fail(f"SHA-1 needs 4 round constants, got {self.round_constant_count}")
            if self.rounds != 80:
                fail(f"SHA-1 needs 80 rounds, got {self.rounds}")
            if self.schedule_copy_count < 16:
                fail("SHA-1 blocks must hold at least 16 words")
        else:
            if self.hash_value_count != 8:
                fail(f"SHA-2 needs 8 hash values, got {self.hash_value_count}")
            if self.round_constant_count != self.rounds:
                fail(f"SHA-2 needs one round constant per round, got {self.round_constant_count} for {self.rounds} rounds")
            if self.schedule_copy_count < 16:
                fail("SHA-2 blocks must hold at least 16 words")

        if len(self.initial_hash_values) != self.hash_value_count:
            fail(f"expected {self.hash_value_count} initial hash values, got {len(self.initial_hash_values)}")
        if len(self.round_constants) != self.round_constant_count:
            fail(f"expected {self.round_constant_count} round constants, got {len(self.round_constants)}")
        for label, values in (("initial hash value", self.initial_hash_values),
                              ("round constant", self.round_constants)):
            for i, value in enumerate(values):
                if not 0 <= value <= self.word_mask:
                    fail(f"{label} {i} ({value:#x}) does not fit in {self.word_size} bytes")
        return self


def _strip_comment(line: str) -> str:
    for marker in ("//", "#"):
        index = line.find(marker)
        if index > -1:
            line = line[:index]
    return line.strip()


def parse_properties(text: str, family: str = "?") -> Dict[str, int]:
    """Parse a ``key=value`` properties resource into descriptor field names.

    Unknown keys are ignored; missing keys and non-integer values raise
    `MalformedDescriptor`.
    """
    values: Dict[str, int] = {}
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = _strip_comment(raw)
        if not line:
            continue
        if "=" not in line:
            raise MalformedDescriptor(family, f"line {lineno} is not a key=value pair: {raw!r}")
        key, _, value = line.partition("=")
        field = _PROPERTY_KEYS.get(key.strip())
        if field is None:
            continue
        try:
            values[field] = int(value.strip(), 10)
        except ValueError:
            raise MalformedDescriptor(family, f"{key.strip()} has non-integer value {value.strip()!r}") from None

    missing = [key for key, field in _PROPERTY_KEYS.items() if field not in values]
    if missing:
        raise MalformedDescriptor(family, f"missing properties: {', '.join(missing)}")
    return values


def _parse_literal(literal: str, base: int, family: str) -> int:
    try:
        return int(literal, base)
    except ValueError:
        raise MalformedDescriptor(family, f"{literal!r} is not a base-{base} literal") from None


def parse_initial_hash_values(text: str, base: int, count: int, family: str = "?") -> Tuple[int, ...]:
    """Parse one literal per non-blank line; exactly `count` are required."""
    values = [
        _parse_literal(line, base, family)
        for line in (_strip_comment(raw) for raw in text.splitlines())
        if line
    ]
    if len(values) != count:
        raise MalformedDescriptor(family, f"expected {count} initial hash values, got {len(values)}")
    return tuple(values)


def parse_round_constants(text: str, base: int, count: int, family: str = "?") -> Tuple[int, ...]:
    """Parse comma-separated literals spread over any number of lines."""
    values = []
    for raw in text.splitlines():
        line = _strip_comment(raw)
        values.extend(
            _parse_literal(literal.strip(), base, family)
            for literal in line.split(",")
            if literal.strip()
        )
    if len(values) != count:
        raise MalformedDescriptor(family, f"expected {count} round constants, got {len(values)}")
    return tuple(values)


def _read_resource(name: str, resource_dir: Optional[Union[str, os.PathLike]]) -> str:
    if resource_dir is not None:
        path = Path(resource_dir) / name
    else:
        path = resources.files("sha_families") / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise MalformedDescriptor(name.split(".")[0], f"cannot read resource {name}: {e}") from e


def load_descriptor(
    family: Union[Family, str],
    resource_dir: Optional[Union[str, os.PathLike]] = None,
) -> FamilyDescriptor:
    """Read and validate the three resources of `family`.

    Resources come from `resource_dir` when given, then from the directory in
    ``$SHA_FAMILIES_DIR``, then from the bundled ``sha_families`` package.
    """
    family = resolve_family(family)
    if resource_dir is None:
        resource_dir = os.environ.get(RESOURCE_DIR_ENV) or None
    name = family.value

    props = parse_properties(_read_resource(f"{name}.properties", resource_dir), name)
    initial_hash_values = parse_initial_hash_values(
        _read_resource(f"{name}.initial-hash-values", resource_dir),
        props["number_base"],
        props["hash_value_count"],
        name,
    )
    round_constants = parse_round_constants(
        _read_resource(f"{name}.round-constants", resource_dir),
        props["number_base"],
        props["round_constant_count"],
        name,
    )
    descriptor = FamilyDescriptor(
        family=family,
        initial_hash_values=initial_hash_values,
        round_constants=round_constants,
        **props,
    ).validate()
    logger.debug(
        "loaded %s: %d-byte words, %d-byte blocks, %d rounds",
        name, descriptor.word_size, descriptor.block_size, descriptor.rounds,
    )
    return descriptor


_cache: Dict[Family, FamilyDescriptor] = {}
_cache_lock = threading.Lock()


def get_descriptor(family: Union[Family, str]) -> FamilyDescriptor:
    """Return the process-wide descriptor for `family`, loading it at most once."""
    family = resolve_family(family)
    descriptor = _cache.get(family)
    if descriptor is not None:
        return descriptor
    with _cache_lock:
        descriptor = _cache.get(family)
        if descriptor is None:
            descriptor = load_descriptor(family)
            _cache[family] = descriptor
            logger.debug("cached descriptor for %s", family.value)
    return descriptor


def clear_descriptor_cache() -> None:
    with _cache_lock:
        _cache.clear()
