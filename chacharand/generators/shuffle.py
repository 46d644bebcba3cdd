"""
In-place uniform random permutation (Durstenfeld's Fisher-Yates).
"""

from chacharand.generators.sampler import UniformSampler


def shuffle(sampler: UniformSampler, sequence) -> None:
    """Shuffle a mutable random-access sequence in place.

    Makes exactly len(sequence) - 1 draws: for i = 1 .. n-1, j is drawn
    uniformly from [0, i] and items i and j are swapped. Each of the n!
    orderings is equally likely because every draw is exact.

    Works on lists, bytearrays and 1-D numpy arrays.
    """
    for i in range(1, len(sequence)):
        j = sampler.below(i + 1)
        sequence[i], sequence[j] = sequence[j], sequence[i]
