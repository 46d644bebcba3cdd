"""
Exception taxonomy for chacharand.

None of these are recoverable in place: once a generator raises one of
them it is halted and every later call raises GeneratorHalted.
"""


class RandomError(Exception):
    """Base class for every error raised by the generator stack."""


class ConfigurationError(RandomError, ValueError):
    """Bad construction input: identifier, test id, key or round count."""


class RangeError(RandomError, ValueError):
    """Bad draw request: min > max, bound outside its type, or bits(n) with n > 64."""


class StreamExhaustion(RandomError):
    """The 64-bit block counter wrapped; the keystream would repeat."""


class GeneratorHalted(RandomError):
    """The generator already failed and accepts no further operations."""
