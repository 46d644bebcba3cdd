"""
ChaCha block function for chacharand.

Pure function: (key, nonce, counter) → 16 pseudo-random 32-bit words.
This is the 64-bit-nonce / 64-bit-counter layout from Bernstein's
original ChaCha, not the 96-bit-nonce IETF variant:

    words  0-3   "expand 32-byte k"
    words  4-11  key
    words 12-13  block counter (low, high)
    words 14-15  nonce (low, high)

All arithmetic is modulo 2^32.

Reference: https://cr.yp.to/chacha/chacha-20080128.pdf
"""

from chacharand.generators.errors import ConfigurationError

WORD_MASK = 0xFFFFFFFF
U64_MASK = (1 << 64) - 1

# "expa", "nd 3", "2-by", "te k"
SIGMA = (0x61707865, 0x3320646E, 0x79622D32, 0x6B206574)

SUPPORTED_ROUNDS = (8, 12, 20)

# Quarter-round index sets: four columns, then four diagonals
COLUMN_ROUNDS = ((0, 4, 8, 12), (1, 5, 9, 13), (2, 6, 10, 14), (3, 7, 11, 15))
DIAGONAL_ROUNDS = ((0, 5, 10, 15), (1, 6, 11, 12), (2, 7, 8, 13), (3, 4, 9, 14))


def rotate_left(x: int, bits: int) -> int:
    return ((x << bits) & WORD_MASK) | (x >> (32 - bits))


def quarter_round(x: list, a: int, b: int, c: int, d: int) -> None:
    """Mix four words of the working state in place (add, xor, rotate)."""
    x[a] = (x[a] + x[b]) & WORD_MASK
    x[d] = rotate_left(x[d] ^ x[a], 16)
    x[c] = (x[c] + x[d]) & WORD_MASK
    x[b] = rotate_left(x[b] ^ x[c], 12)
    x[a] = (x[a] + x[b]) & WORD_MASK
    x[d] = rotate_left(x[d] ^ x[a], 8)
    x[c] = (x[c] + x[d]) & WORD_MASK
    x[b] = rotate_left(x[b] ^ x[c], 7)


def initial_state(key, nonce: int, counter: int) -> list:
    """Build the 16-word input block. Counter and nonce are taken modulo 2^64."""
    counter &= U64_MASK
    nonce &= U64_MASK
    return [
        *SIGMA,
        *key,
        counter & WORD_MASK, counter >> 32,
        nonce & WORD_MASK, nonce >> 32,
    ]


def chacha_block(key, nonce: int, counter: int, rounds: int = 20) -> list:
    """Compute one ChaCha keystream block.

    Args:
        key: Eight 32-bit words.
        nonce: 64-bit nonce.
        counter: 64-bit block counter.
        rounds: 8, 12 or 20 (ChaCha8/12/20). The generator uses 20.

    Returns:
        List of 16 32-bit words: the mixed state added to the input state.
    """
    if rounds not in SUPPORTED_ROUNDS:
        raise ConfigurationError(f"Unsupported round count {rounds}, expected one of {SUPPORTED_ROUNDS}")
    if len(key) != 8:
        raise ConfigurationError(f"Key must have 8 words, got {len(key)}")

    state = initial_state(key, nonce, counter)
    x = list(state)

    for _ in range(rounds // 2):
        for a, b, c, d in COLUMN_ROUNDS:
            quarter_round(x, a, b, c, d)
        for a, b, c, d in DIAGONAL_ROUNDS:
            quarter_round(x, a, b, c, d)

    return [(x[i] + state[i]) & WORD_MASK for i in range(16)]
