"""
Tests for the statistical checks in chacharand.features.uniformity.
"""

import numpy as np
import pytest
from chacharand.features.uniformity import (
    uniform_moments,
    chi_square_uniform,
    permutation_frequency,
    words_to_bits,
    frequency_test,
    block_frequency_test,
    runs_test,
    bitstream_tests,
)
from chacharand.generators.rng import Random


np.random.seed(42)
NUMPY_UNIFORM = np.random.randint(0, 17, size=100000)
SKEWED = np.concatenate([np.zeros(50000, dtype=np.int64), np.random.randint(0, 17, size=50000)])


class TestMoments:

    def test_expected_values(self):
        result = uniform_moments(NUMPY_UNIFORM, 0, 16)
        assert result["expected_mean"] == 8.0
        assert result["expected_variance"] == 24.0
        assert abs(result["mean_z"]) < 4.0
        assert 0.97 < result["variance_ratio"] < 1.03
        assert result["min_seen"] == 0 and result["max_seen"] == 16

    def test_skewed_sample_flagged(self):
        result = uniform_moments(SKEWED, 0, 16)
        assert abs(result["mean_z"]) > 10

    def test_single_value_range(self):
        result = uniform_moments([5, 5, 5], 5, 5)
        assert result["mean_z"] == 0.0
        assert result["variance_ratio"] == 1.0


class TestChiSquare:

    def test_uniform_passes(self):
        result = chi_square_uniform(NUMPY_UNIFORM, 0, 16, buckets=17)
        assert result["buckets"] == 17
        assert result["p_value"] > 0.001

    def test_skewed_fails(self):
        result = chi_square_uniform(SKEWED, 0, 16)
        assert result["p_value"] < 1e-6

    def test_bucket_count_capped_by_range(self):
        assert chi_square_uniform([0, 1, 2, 1], 0, 2, buckets=16)["buckets"] == 3
        assert chi_square_uniform([4, 4], 4, 4)["p_value"] == 1.0

    def test_huge_range(self):
        rng = Random("foo", 11)
        draws = [rng.uniform_uint64(0, 2**64 - 2) for _ in range(4000)]
        assert chi_square_uniform(draws, 0, 2**64 - 2)["p_value"] > 0.001


class TestPermutationFrequency:

    def test_counts_and_invalid(self):
        result = permutation_frequency([[1, 2, 3], [3, 2, 1], [1, 1, 3]], [1, 2, 3])
        assert result["counts"][(1, 2, 3)] == 1
        assert result["counts"][(3, 2, 1)] == 1
        assert result["counts"][(2, 1, 3)] == 0
        assert result["invalid"] == 1

    def test_lopsided_fails(self):
        result = permutation_frequency([[1, 2, 3]] * 600, [1, 2, 3])
        assert result["p_value"] < 1e-6


class TestBitTests:

    def test_words_to_bits_order(self):
        bits = words_to_bits([0x80000001])
        assert bits.tolist() == [1] + [0] * 30 + [1]

    def test_keystream_passes(self):
        rng = Random("foo", 123)
        bits = words_to_bits([rng() for _ in range(4000)])
        assert len(bits) == 128000
        assert frequency_test(bits)["p_value"] > 0.001
        assert block_frequency_test(bits, 128)["p_value"] > 0.001
        assert runs_test(bits)["p_value"] > 0.001

    def test_constant_bits_fail(self):
        bits = np.ones(10000, dtype=np.uint8)
        assert frequency_test(bits)["p_value"] < 0.01
        assert runs_test(bits)["p_value"] == 0.0

    def test_block_frequency_short_input(self):
        assert block_frequency_test(np.ones(10, dtype=np.uint8), 128)["p_value"] == 0.0

    def test_runs_counted_on_alternating_bits(self):
        bits = np.tile(np.array([0, 1], dtype=np.uint8), 500)
        result = runs_test(bits)
        assert result["statistic"] == 1000.0
        assert result["p_value"] < 1e-6

    @pytest.mark.parametrize("bad", [[], np.zeros((4, 4), dtype=np.uint8)])
    def test_rejects_empty_or_2d(self, bad):
        with pytest.raises(ValueError):
            frequency_test(bad)

    def test_bitstream_tests_keys(self):
        rng = Random("foo", 124)
        result = bitstream_tests([rng() for _ in range(1000)], block_size=64)
        assert set(result) == {"frequency_p", "block_frequency_p", "runs_p"}
        assert all(0.0 <= p <= 1.0 for p in result.values())
