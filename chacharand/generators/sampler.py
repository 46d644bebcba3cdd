"""
Exact uniform integer sampling by rejection, with entropy reuse.

The sampler keeps a pair (number_buffer, number_range) where
number_buffer is uniform over [0, number_range). Each draw:

  1. Tops number_range up to 64 bits with fresh bits from the extractor.
  2. Splits [0, number_range) into num_groups full groups of width n plus
     a short trailing group of small_group values.
  3. If number_buffer lands in a full group, the offset inside it is the
     result and the group index (uniform over [0, num_groups)) is kept
     for the next draw.
  4. Otherwise the offset inside the short group (uniform over
     [0, small_group)) is kept and the loop goes back to 1.

No value is ever favoured, and leftover entropy carries over between
draws instead of being thrown away. The order in which bits are folded
in is part of the output contract: changing it changes every draw.
"""

import operator

from chacharand.generators.bits import BitExtractor
from chacharand.generators.errors import RangeError

U64_SPAN = 1 << 64
U64_MAX = U64_SPAN - 1
I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1
U32_MAX = (1 << 32) - 1
I32_MIN = -(1 << 31)
I32_MAX = (1 << 31) - 1


def _check_bounds(name: str, min_value, max_value, lower: int, upper: int) -> tuple[int, int]:
    """Coerce both bounds to Python ints and check them against [lower, upper]."""
    try:
        min_value, max_value = operator.index(min_value), operator.index(max_value)
    except TypeError:
        raise RangeError(f"{name}: bounds must be integers, got {min_value!r} and {max_value!r}") from None
    if min_value > max_value:
        raise RangeError(f"{name}: min {min_value} > max {max_value}")
    if min_value < lower or max_value > upper:
        raise RangeError(f"{name}: bounds [{min_value}, {max_value}] outside [{lower}, {upper}]")
    return min_value, max_value


class UniformSampler:
    """Uniform integers over inclusive ranges, drawn from a BitExtractor."""

    def __init__(self, extractor: BitExtractor):
        self._extractor = extractor
        self.number_buffer = 0
        self.number_range = 1

    def below(self, n: int) -> int:
        """Return a uniform integer in [0, n) for 1 <= n <= 2^64."""
        if n == U64_SPAN:
            return self._extractor.bits(64)

        while True:
            zeros = 64 - self.number_range.bit_length()
            self.number_range <<= zeros
            self.number_buffer = (self.number_buffer << zeros) | self._extractor.bits(zeros)

            if self.number_range < n:
                # Only reachable for n > 2^63: no full group fits in 64 bits.
                return self._below_wide(n)

            num_groups, small_group = divmod(self.number_range, n)
            group, in_group = divmod(self.number_buffer, n)

            if group < num_groups:
                self.number_range = num_groups
                self.number_buffer = group
                return in_group

            self.number_range = small_group
            self.number_buffer = in_group

    def _below_wide(self, n: int) -> int:
        # 2^63 < n < 2^64, so each 64-bit draw is accepted with probability > 1/2
        while True:
            value = self._extractor.bits(64)
            if value < n:
                return value

    def uniform_uint64(self, min_value: int, max_value: int) -> int:
        min_value, max_value = _check_bounds("uniform_uint64", min_value, max_value, 0, U64_MAX)
        return min_value + self.below(max_value - min_value + 1)

    def uniform_int64(self, min_value: int, max_value: int) -> int:
        min_value, max_value = _check_bounds("uniform_int64", min_value, max_value, I64_MIN, I64_MAX)
        return min_value + self.below(max_value - min_value + 1)

    def uniform_uint(self, min_value: int, max_value: int) -> int:
        min_value, max_value = _check_bounds("uniform_uint", min_value, max_value, 0, U32_MAX)
        return self.uniform_uint64(min_value, max_value)

    def uniform_int(self, min_value: int, max_value: int) -> int:
        min_value, max_value = _check_bounds("uniform_int", min_value, max_value, I32_MIN, I32_MAX)
        return self.uniform_int64(min_value, max_value)
