"""SHA-1 / SHA-512 digest engine built on the round functions in `compress.py`.

This module provides:

- `SecureHashAlgorithm(family).digest(data) -> str`: the lowercase hex digest
  of bytes, text (UTF-8 encoded), a binary file object or a file path.
- `hexdigest(family, data)`: one-shot convenience wrapper.
- The padding, block segmentation, schedule and state-update helpers the
  engine is made of, so each stage can be exercised on its own.

The engine is parameterized by a `FamilyDescriptor` (see `family_loader`);
family-specific behaviour is picked once, at construction, as a
`RoundStrategy`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence, Tuple, Union

from compress import sha1_compress, sha1_expand, sha512_compress, sha512_expand
from family_loader import Family, FamilyDescriptor, get_descriptor, resolve_family


@dataclass(frozen=True)
class RoundStrategy:
    """Family-specific schedule recurrence and per-block round loop."""

    expand: Callable[[List[int], int], List[int]]
    compress: Callable[..., Tuple[int, ...]]


_STRATEGIES = {
    Family.SHA1: RoundStrategy(expand=sha1_expand, compress=sha1_compress),
    Family.SHA2_64: RoundStrategy(expand=sha512_expand, compress=sha512_compress),
}


def calculate_number_of_blocks(length: int, block_size: int, length_field_width: int) -> int:
    """Number of blocks a `length`-byte message occupies once padded.

    The message, the 0x80 byte and the length field always fit; when the
    0x80 byte pushes the message past ``block_size - length_field_width``
    a whole extra block is needed.
    """
    padded = length + 1
    padded += (block_size - length_field_width - padded) % block_size
    return (padded + length_field_width) // block_size


def pad_message(message: bytes, block_size: int, length_field_width: int) -> bytes:
    """Pad `message` to a multiple of `block_size` bytes.

    Appends 0x80, zero bytes until the length is ``block_size -
    length_field_width`` modulo ``block_size``, then the message length in
    bits as a big-endian field of `length_field_width` bytes. Bit lengths
    too large for the field keep only their low-order bytes.
    """
    ml_bits = len(message) * 8
    field_mask = (1 << (8 * length_field_width)) - 1

    padded = bytearray(message)
    padded.append(0x80)
    padded.extend(bytes((block_size - length_field_width - len(padded)) % block_size))
    padded.extend((ml_bits & field_mask).to_bytes(length_field_width, byteorder="big"))
    return bytes(padded)


def split_into_blocks(padded: bytes, block_size: int) -> List[bytes]:
    """Split a padded message into `block_size`-byte blocks."""
    if len(padded) % block_size != 0:
        raise ValueError(
            f"Padded message length must be a multiple of {block_size} bytes, got {len(padded)}"
        )
    return [padded[i : i + block_size] for i in range(0, len(padded), block_size)]


def init_message_schedule(block: bytes, descriptor: FamilyDescriptor) -> List[int]:
    """Build the full ``descriptor.rounds``-word message schedule of one block.

    The first ``block_size / word_size`` words are the block's own big-endian
    words; the rest follow the family recurrence.
    """
    if len(block) != descriptor.block_size:
        raise ValueError(f"Expected {descriptor.block_size}-byte block, got {len(block)}")

    size = descriptor.word_size
    copied = descriptor.schedule_copy_count
    ws = [0] * descriptor.rounds
    for i in range(copied):
        ws[i] = int.from_bytes(block[size * i : size * (i + 1)], byteorder="big")

    return _STRATEGIES[descriptor.family].expand(ws, copied)


def update_hash_state(
    running: Sequence[int], working: Sequence[int], word_mask: int
) -> Tuple[int, ...]:
    """Fold the working words back into the running digest (modular add)."""
    if len(running) != len(working):
        raise ValueError(
            f"State size mismatch: {len(running)} running words, {len(working)} working words"
        )
    return tuple((h + v) & word_mask for h, v in zip(running, working))


def finalize_digest(state: Iterable[int], word_size: int) -> str:
    """Render each word as ``2 * word_size`` zero-padded lowercase hex digits."""
    return "".join(f"{word:0{2 * word_size}x}" for word in state)


def _read_input(data) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, os.PathLike):
        with open(data, "rb") as f:
            return f.read()
    if hasattr(data, "read"):
        content = data.read()
        if isinstance(content, str):
            return content.encode("utf-8")
        return bytes(content)
    raise TypeError(f"cannot hash object of type {type(data).__name__}")


class SecureHashAlgorithm:
    """Digest engine for one hash family.

    Every call to `digest` starts from fresh state seeded with the family's
    initial hash values, so one instance can be used repeatedly and from
    several threads; the descriptor it shares is read-only.
    """

    def __init__(self, family: Union[Family, str, FamilyDescriptor]):
        if isinstance(family, FamilyDescriptor):
            self.descriptor = family.validate()
        else:
            self.descriptor = get_descriptor(resolve_family(family))
        self.family = self.descriptor.family
        self._strategy = _STRATEGIES[self.family]
        self._last_digest = ""

    @property
    def digest_size(self) -> int:
        return self.descriptor.digest_size

    @property
    def hex_length(self) -> int:
        return self.descriptor.hex_length

    def number_of_blocks(self, length: int) -> int:
        return calculate_number_of_blocks(
            length, self.descriptor.block_size, self.descriptor.length_field_width
        )

    def _run(self, message: bytes, track: bool):
        descriptor = self.descriptor
        padded = pad_message(message, descriptor.block_size, descriptor.length_field_width)

        state = tuple(descriptor.initial_hash_values)
        states: List[Tuple[int, ...]] = []
        for block in split_into_blocks(padded, descriptor.block_size):
            ws = init_message_schedule(block, descriptor)
            working = self._strategy.compress(state, ws, descriptor.round_constants)
            state = update_hash_state(state, working, descriptor.word_mask)
            if track:
                states.append(state)
        return state, states

    def compute(self, data) -> Tuple[int, ...]:
        """Return the final running digest of `data` as a tuple of words."""
        state, _ = self._run(_read_input(data), track=False)
        return state

    def digest(self, data) -> str:
        """Return the hex digest of bytes, text, a file object or a path.

        Unreadable files raise `OSError`; no partial digest is produced.
        """
        state = self.compute(data)
        self._last_digest = finalize_digest(state, self.descriptor.word_size)
        return self._last_digest

    def digest_with_tracking(self, data) -> Tuple[str, List[Tuple[int, ...]]]:
        """Compute the digest while recording the running digest after each block.

        Returns:
            (digest_hex, states)
            where states[block_idx] is the running digest after that block
        """
        state, states = self._run(_read_input(data), track=True)
        self._last_digest = finalize_digest(state, self.descriptor.word_size)
        return self._last_digest, states

    def __str__(self) -> str:
        return self._last_digest

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.family.value!r})"


def hexdigest(family: Union[Family, str], data) -> str:
    """Convenience helper to return the hex digest of `data` under `family`."""
    return SecureHashAlgorithm(family).digest(data)
