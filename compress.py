"""Forward SHA-1 and SHA-512 compression rounds and schedule recurrences.

SHA-1 (five 32-bit working words, 80 rounds in four 20-round bands):

    f     = Ch / Parity / Maj / Parity   (selected by band)
    temp  = rotl(a, 5) + f + e + K[band] + w
    e' = d;  d' = c;  c' = rotl(b, 30);  b' = a;  a' = temp

SHA-512 (eight 64-bit working words, one round constant per round):

    S1    = (e >>> 14) ^ (e >>> 18) ^ (e >>> 41)
    ch    = (e & f) ^ (~e & g)
    temp1 = h + S1 + ch + k + w

    S0    = (a >>> 28) ^ (a >>> 34) ^ (a >>> 39)
    maj   = (a & b) ^ (a & c) ^ (b & c)
    temp2 = S0 + maj

    a' = temp1 + temp2
    e' = d + temp1
    b' = a;  c' = b;  d' = c;  f' = e;  g' = f;  h' = g

All additions wrap modulo 2**32 (SHA-1) or 2**64 (SHA-512).
"""

from __future__ import annotations

from typing import List, Sequence, Tuple


MASK32 = 0xFFFFFFFF
MASK64 = 0xFFFFFFFFFFFFFFFF

SHA1_BAND_LENGTH = 20


def _rotl(x: int, n: int, bits: int = 32) -> int:
    """Left-rotate a `bits`-wide word `x` by `n` bits."""
    mask = (1 << bits) - 1
    x &= mask
    return ((x << n) | (x >> (bits - n))) & mask


def _rotr(x: int, n: int, bits: int = 32) -> int:
    """Right-rotate a `bits`-wide word `x` by `n` bits."""
    mask = (1 << bits) - 1
    x &= mask
    return ((x >> n) | (x << (bits - n))) & mask


def _rotr64(x: int, n: int) -> int:
    return _rotr(x, n, 64)


def _shr64(x: int, n: int) -> int:
    """Right-shift a 64-bit word `x` by `n` bits."""
    return (x & MASK64) >> n


#
# SHA-1
#

def sha1_band(i: int) -> int:
    """Band index (0..3) of SHA-1 round `i`; also the round-constant index."""
    return i // SHA1_BAND_LENGTH


def sha1_f(band: int, b: int, c: int, d: int) -> int:
    """Nonlinear function of SHA-1 band `band`."""
    if band == 0:
        return ((b & c) | (~b & d)) & MASK32
    if band == 2:
        return (b & c) | (b & d) | (c & d)
    return b ^ c ^ d


def sha1_compression(
    a: int,
    b: int,
    c: int,
    d: int,
    e: int,
    w: int,
    k: int,
    band: int,
) -> Tuple[int, int, int, int, int]:
    """Perform one SHA-1 round.

    Parameters
    ----------
    a, b, c, d, e : int
        32-bit words representing the current working state.
    w : int
        Message schedule word `w[i]`.
    k : int
        Round constant of the band that round `i` belongs to.
    band : int
        Band index (0..3), selecting the nonlinear function.

    Returns
    -------
    (a_new, b_new, c_new, d_new, e_new) : tuple[int, ...]
        Updated working state, reduced modulo 2**32.
    """
    temp = (_rotl(a, 5) + sha1_f(band, b, c, d) + e + k + w) & MASK32
    return temp, a & MASK32, _rotl(b, 30), c & MASK32, d & MASK32


def sha1_compress(
    state: Sequence[int],
    ws: Sequence[int],
    ks: Sequence[int],
    track: bool = False,
):
    """Run every SHA-1 round of one block over the working words `state`.

    ``ws`` must hold one schedule word per round and ``ks`` the four band
    constants. With ``track=True`` the working state after every round is
    returned as well.
    """
    if len(state) != 5:
        raise ValueError(f"SHA-1 state has 5 words, got {len(state)}")
    if len(ks) != 4:
        raise ValueError(f"SHA-1 expects 4 round constants, got {len(ks)}")

    a, b, c, d, e = state
    rounds: List[Tuple[int, ...]] = []
    for i, w in enumerate(ws):
        band = sha1_band(i)
        a, b, c, d, e = sha1_compression(a, b, c, d, e, w, ks[band], band)
        if track:
            rounds.append((a, b, c, d, e))

    if track:
        return (a, b, c, d, e), rounds
    return a, b, c, d, e


def sha1_expand(ws: List[int], start: int) -> List[int]:
    """Fill ``ws[start:]`` in place with the SHA-1 recurrence."""
    for i in range(start, len(ws)):
        ws[i] = _rotl(ws[i - 3] ^ ws[i - 8] ^ ws[i - 14] ^ ws[i - 16], 1)
    return ws


#
# SHA-512
#

def small_sigma0(x: int) -> int:
    """SHA-512 function σ0 used in the message schedule."""
    return _rotr64(x, 1) ^ _rotr64(x, 8) ^ _shr64(x, 7)


def small_sigma1(x: int) -> int:
    """SHA-512 function σ1 used in the message schedule."""
    return _rotr64(x, 19) ^ _rotr64(x, 61) ^ _shr64(x, 6)


def big_sigma0(x: int) -> int:
    return _rotr64(x, 28) ^ _rotr64(x, 34) ^ _rotr64(x, 39)


def big_sigma1(x: int) -> int:
    return _rotr64(x, 14) ^ _rotr64(x, 18) ^ _rotr64(x, 41)


def choice(x: int, y: int, z: int) -> int:
    return ((x & y) ^ (~x & z)) & MASK64


def majority(x: int, y: int, z: int) -> int:
    return (x & y) ^ (x & z) ^ (y & z)


def sha512_compression(
    a: int,
    b: int,
    c: int,
    d: int,
    e: int,
    f: int,
    g: int,
    h: int,
    w: int,
    k: int,
) -> Tuple[int, int, int, int, int, int, int, int]:
    """Perform one SHA-512 round.

    Parameters
    ----------
    a, b, c, d, e, f, g, h : int
        64-bit words representing the current working state.
    w : int
        Message schedule word `w[i]`.
    k : int
        Round constant `k[i]`.

    Returns
    -------
    (a_new, b_new, c_new, d_new, e_new, f_new, g_new, h_new) : tuple[int, ...]
        Updated working state after one round, all reduced modulo 2**64.
    """
    temp1 = (h + big_sigma1(e) + choice(e, f, g) + k + w) & MASK64
    temp2 = (big_sigma0(a) + majority(a, b, c)) & MASK64

    return (
        (temp1 + temp2) & MASK64,
        a,
        b,
        c,
        (d + temp1) & MASK64,
        e,
        f,
        g,
    )


def sha512_compress(
    state: Sequence[int],
    ws: Sequence[int],
    ks: Sequence[int],
    track: bool = False,
):
    """Run every SHA-512 round of one block over the working words `state`.

    ``ws`` and ``ks`` must both hold one word per round.
    """
    if len(state) != 8:
        raise ValueError(f"SHA-512 state has 8 words, got {len(state)}")
    if len(ws) != len(ks):
        raise ValueError(
            f"SHA-512 expects one round constant per schedule word, got {len(ks)} for {len(ws)}"
        )

    a, b, c, d, e, f, g, h = state
    rounds: List[Tuple[int, ...]] = []
    for w, k in zip(ws, ks):
        a, b, c, d, e, f, g, h = sha512_compression(a, b, c, d, e, f, g, h, w, k)
        if track:
            rounds.append((a, b, c, d, e, f, g, h))

    if track:
        return (a, b, c, d, e, f, g, h), rounds
    return a, b, c, d, e, f, g, h


def sha512_expand(ws: List[int], start: int) -> List[int]:
    """Fill ``ws[start:]`` in place with the SHA-512 recurrence."""
    for i in range(start, len(ws)):
        ws[i] = (small_sigma1(ws[i - 2]) + ws[i - 7] + small_sigma0(ws[i - 15]) + ws[i - 16]) & MASK64
    return ws
