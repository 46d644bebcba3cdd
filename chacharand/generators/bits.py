"""
Bit extraction over the keystream.

The word stream is read as one continuous bitstream, most significant
bit of each word first. bits(n) slices the next n bits off that stream,
so the bits returned never depend on how earlier requests were sized:
bits(3) then bits(29) yields the same 32 bits as a single bits(32).
"""

from chacharand.generators.errors import RangeError
from chacharand.generators.stream import StreamState

MAX_BITS = 64
WORD_BITS = 32


class BitExtractor:
    """Arbitrary-width (0..64 bit) reads from a StreamState.

    Unconsumed bits of the last word are kept as the low `_bit_count`
    bits of `_residual`.
    """

    def __init__(self, stream: StreamState):
        self._stream = stream
        self._residual = 0
        self._bit_count = 0

    def bits(self, n: int) -> int:
        """Return the next `n` bits of the stream as an unsigned integer.

        Args:
            n: Number of bits, 0 <= n <= 64. bits(0) returns 0 and reads nothing.

        Returns:
            Integer in [0, 2^n).
        """
        if n < 0 or n > MAX_BITS:
            raise RangeError(f"bits(n) needs 0 <= n <= {MAX_BITS}, got {n}")

        result = 0
        remaining = n
        while self._bit_count < remaining:
            # Fold the whole residual in, then replenish from the stream
            result = (result << self._bit_count) | self._residual
            remaining -= self._bit_count
            self._residual = self._stream.next_word()
            self._bit_count = WORD_BITS

        left = self._bit_count - remaining
        result = (result << remaining) | (self._residual >> left)
        self._residual &= (1 << left) - 1
        self._bit_count = left
        return result
