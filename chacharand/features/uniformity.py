"""
Statistical checks on chacharand output.

Used by the stream report tool and by the test suite. Each function
takes draws already produced by a generator and returns a dict of
named numbers; nothing here touches generator state.

Checks:
  - Sample moments of uniform integer draws against the discrete uniform
  - Chi-squared goodness of fit over equal-width buckets
  - Permutation frequency of repeated shuffles
  - NIST SP 800-22 frequency, block frequency and runs tests on keystream bits

Reference: https://csrc.nist.gov/publications/detail/sp/800-22/rev-1a/final
"""

from collections import Counter
from itertools import permutations

import numpy as np
from scipy.special import erfc, gammaincc
from scipy.stats import chi2


def uniform_moments(values, min_value: int, max_value: int) -> dict:
    """Compare sample mean and variance with the discrete uniform on [min, max].

    For n = max - min + 1 values the expected mean is (min + max) / 2 and
    the expected variance (n^2 - 1) / 12. `mean_z` is the distance of the
    sample mean from its expectation in standard errors.
    """
    x = np.asarray(values, dtype=np.float64)
    count = len(x)
    n = float(max_value - min_value + 1)

    expected_mean = (min_value + max_value) / 2.0
    expected_variance = (n * n - 1.0) / 12.0

    mean = float(x.mean())
    variance = float(x.var())

    if expected_variance == 0.0:
        mean_z = 0.0 if mean == expected_mean else float("inf")
        variance_ratio = 1.0 if variance == 0.0 else float("inf")
    else:
        mean_z = (mean - expected_mean) / np.sqrt(expected_variance / count)
        variance_ratio = variance / expected_variance

    return {
        "count": count,
        "mean": mean,
        "variance": variance,
        "expected_mean": expected_mean,
        "expected_variance": expected_variance,
        "mean_z": float(mean_z),
        "variance_ratio": float(variance_ratio),
        "min_seen": int(min(values)),
        "max_seen": int(max(values)),
    }


def chi_square_uniform(values, min_value: int, max_value: int, buckets: int = 16) -> dict:
    """Chi-squared test that draws spread evenly over [min, max].

    The range is cut into `buckets` equal-width buckets (fewer when the
    range itself is smaller). Bucket widths differ by at most one value
    when the range does not divide evenly, and the expected counts are
    weighted accordingly.
    """
    n = max_value - min_value + 1
    buckets = int(min(buckets, n))
    if buckets < 2:
        return {"p_value": 1.0, "statistic": 0.0, "buckets": buckets}

    # Integer bucket index: floor((v - min) * buckets / n), exact for big ranges
    offsets = [(int(v) - min_value) * buckets // n for v in values]
    observed = np.bincount(offsets, minlength=buckets).astype(np.float64)

    edges = [(k * n + buckets - 1) // buckets for k in range(buckets + 1)]
    widths = np.diff(np.array(edges, dtype=np.float64))
    expected = len(values) * widths / n

    statistic = float(np.sum((observed - expected) ** 2 / expected))
    p_value = float(chi2.sf(statistic, df=buckets - 1))
    return {"p_value": p_value, "statistic": statistic, "buckets": buckets}


def permutation_frequency(orderings, items) -> dict:
    """Count how often each ordering of `items` appeared.

    Args:
        orderings: Iterable of shuffled sequences.
        items: The original items; every ordering must be a permutation of them.

    Returns:
        Dict with per-permutation counts, a chi-squared p-value against
        equal frequencies, and the number of orderings that were not
        permutations of `items` at all.
    """
    expected_keys = list(permutations(items))
    target = sorted(items)

    counts = Counter()
    invalid = 0
    for ordering in orderings:
        key = tuple(ordering)
        if sorted(key) != target:
            invalid += 1
            continue
        counts[key] += 1

    observed = np.array([counts[k] for k in expected_keys], dtype=np.float64)
    total = observed.sum()
    if total == 0 or len(expected_keys) < 2:
        p_value, statistic = 1.0, 0.0
    else:
        expected = total / len(expected_keys)
        statistic = float(np.sum((observed - expected) ** 2 / expected))
        p_value = float(chi2.sf(statistic, df=len(expected_keys) - 1))

    return {
        "counts": {k: int(counts[k]) for k in expected_keys},
        "invalid": invalid,
        "p_value": p_value,
        "statistic": statistic,
    }


def words_to_bits(words) -> np.ndarray:
    """Unpack 32-bit words into a 0/1 array, most significant bit first."""
    arr = np.asarray(words, dtype=">u4")
    return np.unpackbits(arr.view(np.uint8))


def _bit_array(bits) -> np.ndarray:
    x = np.asarray(bits, dtype=np.int8)
    if x.ndim != 1 or x.size == 0:
        raise ValueError("expected a non-empty 1-D array of bits")
    return x


def frequency_test(bits) -> dict:
    """SP 800-22 monobit test: ones and zeros should be equally common."""
    x = _bit_array(bits)
    excess = 2 * int(x.sum()) - x.size  # ones minus zeros
    statistic = abs(excess) / np.sqrt(x.size)
    return {"p_value": float(erfc(statistic / np.sqrt(2))), "statistic": float(statistic)}


def block_frequency_test(bits, block_size: int = 128) -> dict:
    """SP 800-22 block frequency test over consecutive `block_size`-bit blocks.

    A trailing partial block is ignored. Input shorter than one block
    scores p = 0.
    """
    x = _bit_array(bits)
    num_blocks = x.size // block_size
    if num_blocks == 0:
        return {"p_value": 0.0, "statistic": float("inf")}

    ones = x[:num_blocks * block_size].reshape(num_blocks, block_size).sum(axis=1)
    statistic = 4.0 * block_size * float(np.sum((ones / block_size - 0.5) ** 2))
    return {"p_value": float(gammaincc(num_blocks / 2, statistic / 2)), "statistic": statistic}


def runs_test(bits) -> dict:
    """SP 800-22 runs test: counts maximal runs of equal bits.

    Scores p = 0 without counting when the ones proportion is already
    too far from 1/2 for the test to apply.
    """
    x = _bit_array(bits)
    n = x.size
    ones = float(x.mean())
    if abs(ones - 0.5) >= 2.0 / np.sqrt(n):
        return {"p_value": 0.0, "statistic": float("nan")}

    runs = 1 + int(np.count_nonzero(np.diff(x)))
    balance = 2.0 * ones * (1.0 - ones)
    p_value = erfc(abs(runs - n * balance) / (np.sqrt(2.0 * n) * balance))
    return {"p_value": float(p_value), "statistic": float(runs)}


def bitstream_tests(words, block_size: int = 128) -> dict:
    """p-values of the three bit tests over 32-bit output words."""
    bits = words_to_bits(words)
    return {
        "frequency_p": frequency_test(bits)["p_value"],
        "block_frequency_p": block_frequency_test(bits, block_size)["p_value"],
        "runs_p": runs_test(bits)["p_value"],
    }
