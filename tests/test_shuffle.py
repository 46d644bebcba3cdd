"""
Tests for the Fisher-Yates shuffle.
"""

import numpy as np
import pytest
from chacharand.generators.rng import Random, derive_nonce
from chacharand.generators.shuffle import shuffle
from chacharand.features.uniformity import permutation_frequency


class CountingSampler:
    """Records every below() call and always answers 0."""

    def __init__(self):
        self.calls = []

    def below(self, n):
        self.calls.append(n)
        return 0


class TestShuffleMechanics:

    @pytest.mark.parametrize("size", [0, 1, 2, 5, 50])
    def test_draw_count(self, size):
        sampler = CountingSampler()
        shuffle(sampler, list(range(size)))
        assert sampler.calls == list(range(2, size + 1))

    def test_swap_pattern(self):
        # j = 0 every time: item i swaps with the front, rotating the list
        items = [1, 2, 3, 4]
        shuffle(CountingSampler(), items)
        assert items == [4, 1, 2, 3]

    def test_keeps_multiset(self):
        rng = Random("foo", 123)
        v = [1, 2, 3]
        w = list(v)
        rng.shuffle(w)
        assert sorted(w) == v

    def test_numpy_and_bytearray(self):
        rng = Random("foo", 9)
        arr = np.arange(100)
        rng.shuffle(arr)
        assert sorted(arr.tolist()) == list(range(100))

        buf = bytearray(range(50))
        rng.shuffle(buf)
        assert sorted(buf) == list(range(50))

    def test_deterministic(self):
        a, b = list(range(30)), list(range(30))
        Random("foo", 7).shuffle(a)
        Random("foo", 7).shuffle(b)
        assert a == b
        assert a != list(range(30))


class TestShuffleDistribution:

    def test_three_items_over_many_test_ids(self):
        # "foo" occupies nonce bits 4..12, so test ids are spaced above bit 13
        test_ids = [i << 13 for i in range(6000)]
        assert len({derive_nonce("foo", t) for t in test_ids}) == len(test_ids)

        orderings = []
        for test_id in test_ids:
            w = [1, 2, 3]
            Random("foo", test_id).shuffle(w)
            orderings.append(w)

        result = permutation_frequency(orderings, [1, 2, 3])
        assert result["invalid"] == 0
        assert len(result["counts"]) == 6
        for perm, count in result["counts"].items():
            assert 800 < count < 1200, f"{perm} appeared {count} times"
        assert result["p_value"] > 0.001

    def test_one_stream_many_shuffles(self):
        rng = Random("foo", 123)
        orderings = []
        for _ in range(6000):
            w = [1, 2, 3]
            rng.shuffle(w)
            orderings.append(w)
        result = permutation_frequency(orderings, [1, 2, 3])
        assert result["invalid"] == 0
        assert result["p_value"] > 0.001

    def test_consecutive_test_ids_share_nonces(self):
        # Low test ids overlap the identifier bits: 0..15 and 16..31 give the same 16 nonces
        low = {derive_nonce("foo", t) for t in range(16)}
        assert {derive_nonce("foo", t) for t in range(16, 32)} == low
        assert len(low) == 16
