"""
Keystream state: nonce, 64-bit block counter and a one-block word buffer.
"""

from chacharand.cipher.chacha import chacha_block, U64_MASK
from chacharand.generators.errors import StreamExhaustion

BLOCK_WORDS = 16


class StreamState:
    """Serves keystream words one at a time, computing a block when empty.

    The counter only moves forward. Incrementing it past 2^64 - 1 would
    reuse a (nonce, counter) pair, so that refill raises StreamExhaustion.
    """

    def __init__(self, key: tuple, nonce: int):
        self._key = key
        self.nonce = nonce & U64_MASK
        self.counter = 0
        self._buffer = [0] * BLOCK_WORDS
        self._cursor = BLOCK_WORDS  # empty: first read refills

    def __repr__(self) -> str:
        return f"StreamState(nonce=0x{self.nonce:016x}, counter={self.counter}, cursor={self._cursor})"

    def _refill(self) -> None:
        next_counter = (self.counter + 1) & U64_MASK
        if next_counter == 0:
            raise StreamExhaustion(
                f"Block counter exhausted for nonce 0x{self.nonce:016x}; keystream would repeat"
            )
        self._buffer = chacha_block(self._key, self.nonce, self.counter)
        self._cursor = 0
        self.counter = next_counter

    def next_word(self) -> int:
        """Return the next 32-bit keystream word."""
        if self._cursor == BLOCK_WORDS:
            self._refill()
        word = self._buffer[self._cursor]
        self._cursor += 1
        return word

    def seek_block(self, counter: int) -> None:
        """Jump to block `counter` and drop buffered words. Test hook."""
        self.counter = counter & U64_MASK
        self._cursor = BLOCK_WORDS
