"""
Stream quality report for chacharand.

Draws from Random instances for the configured problem identifier and
test ids, runs the uniformity checks on the draws and logs a summary.
Generated values are never written to disk; only statistics are logged.

Usage:
    python -m chacharand.tools.stream_report
    CHACHARAND_KEY=<64 hex digits> python -m chacharand.tools.stream_report
"""

import numpy as np
from tqdm import tqdm

from chacharand.utils.config import config_section
from chacharand.utils.logger import get_logger
from chacharand.generators.rng import Random
from chacharand.features.uniformity import (
    uniform_moments,
    chi_square_uniform,
    permutation_frequency,
    bitstream_tests,
)

logger = get_logger(__name__)

# p-values below this are flagged in the log
ALPHA = 0.01


def report_uniform(problem, test_id: int, min_value: int, max_value: int,
                   num_draws: int, buckets: int = 16) -> dict:
    """Draw `num_draws` values of uniform_int64(min, max) and summarize them."""
    rng = Random(problem, test_id)
    draws = np.fromiter(
        (rng.uniform_int64(min_value, max_value)
         for _ in tqdm(range(num_draws), desc=f"  [{min_value}, {max_value}]", leave=False)),
        dtype=np.int64,
        count=num_draws,
    )

    result = uniform_moments(draws, min_value, max_value)
    result.update({f"chi2_{k}": v for k, v in chi_square_uniform(draws, min_value, max_value, buckets).items()})
    return result


def report_shuffle(problem, test_id: int, trials: int) -> dict:
    """Shuffle [1, 2, 3] `trials` times on one stream and count the orderings."""
    rng = Random(problem, test_id)
    orderings = []
    for _ in range(trials):
        items = [1, 2, 3]
        rng.shuffle(items)
        orderings.append(items)
    return permutation_frequency(orderings, [1, 2, 3])


def report_bitstream(problem, test_id: int, num_words: int, block_size: int = 128) -> dict:
    """Run the NIST bit tests on `num_words` consecutive 32-bit outputs."""
    rng = Random(problem, test_id)
    return bitstream_tests([rng() for _ in range(num_words)], block_size)


def _flag(p_value: float) -> str:
    return "  <-- low" if p_value < ALPHA else ""


def run_report(config: dict | None = None) -> dict:
    """Run every configured check and log the results.

    Returns:
        Nested dict: test_id -> section -> results.
    """
    report_cfg = config_section("report", config)

    problem = report_cfg.get("problem", "foo")
    test_ids = report_cfg.get("test_ids", [0])
    num_draws = report_cfg.get("num_draws", 100000)
    ranges = report_cfg.get("ranges", [[0, 16]])
    shuffle_trials = report_cfg.get("shuffle_trials", 6000)
    bitstream_words = report_cfg.get("bitstream_words", 4000)
    block_size = report_cfg.get("block_size", 128)
    buckets = report_cfg.get("chi_square_buckets", 16)

    logger.info(f"Stream report: problem={problem!r}, test ids={test_ids}, {num_draws} draws per range")

    results = {}
    for test_id in test_ids:
        logger.info(f"--- test id {test_id} ---")
        section = {"uniform": {}, "shuffle": None, "bitstream": None}

        for min_value, max_value in ranges:
            r = report_uniform(problem, test_id, min_value, max_value, num_draws, buckets)
            section["uniform"][(min_value, max_value)] = r
            logger.info(
                f"  uniform [{min_value}, {max_value}]: mean {r['mean']:.4f} "
                f"(expected {r['expected_mean']:.4f}, z={r['mean_z']:+.2f}), "
                f"variance ratio {r['variance_ratio']:.4f}, "
                f"chi2 p={r['chi2_p_value']:.4f}{_flag(r['chi2_p_value'])}"
            )

        shuffled = report_shuffle(problem, test_id, shuffle_trials)
        section["shuffle"] = shuffled
        counts = ", ".join(f"{''.join(map(str, k))}:{v}" for k, v in shuffled["counts"].items())
        logger.info(f"  shuffle [1,2,3] x{shuffle_trials}: {counts}, "
                    f"p={shuffled['p_value']:.4f}{_flag(shuffled['p_value'])}")
        if shuffled["invalid"]:
            logger.warning(f"  shuffle produced {shuffled['invalid']} non-permutations")

        bit_result = report_bitstream(problem, test_id, bitstream_words, block_size)
        section["bitstream"] = bit_result
        for name, p_value in bit_result.items():
            logger.info(f"  {name:20s} {p_value:.4f}{_flag(p_value)}")

        results[test_id] = section

    return results


if __name__ == "__main__":
    run_report()
