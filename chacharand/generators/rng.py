"""
Deterministic random source for reproducible test data.

A Random instance is fully determined by (key, problem identifier,
test id): the same triple and the same sequence of calls give the same
results on every run and every platform, so test files can be
regenerated on demand instead of stored.

Usage:
    from chacharand.generators.rng import Random
    rng = Random("foo", 123)           # key from config / environment
    n = rng.uniform_int(1, 100)
    rng.shuffle(items)

Layers, leaves first:
    chacha_block → StreamState → BitExtractor → UniformSampler → shuffle
"""

from functools import wraps

from chacharand.utils.keys import load_key, validate_key
from chacharand.utils.logger import get_logger
from chacharand.generators.errors import ConfigurationError, GeneratorHalted, RandomError
from chacharand.generators.stream import StreamState
from chacharand.generators.bits import BitExtractor
from chacharand.generators.sampler import UniformSampler
from chacharand.generators.shuffle import shuffle

logger = get_logger(__name__)

MAX_IDENTIFIER_BYTES = 4
U32_MAX = 0xFFFFFFFF

FRESH = "fresh"
STREAMING = "streaming"
HALTED = "halted"


def encode_identifier(problem_identifier) -> bytes:
    """Return the identifier as bytes, checking length and zero bytes."""
    if isinstance(problem_identifier, str):
        problem_identifier = problem_identifier.encode("utf-8")
    elif not isinstance(problem_identifier, (bytes, bytearray)):
        raise ConfigurationError(
            f"Problem identifier must be str or bytes, got {type(problem_identifier).__name__}"
        )
    ident = bytes(problem_identifier)

    if len(ident) > MAX_IDENTIFIER_BYTES:
        raise ConfigurationError(
            f"Problem identifier {ident!r} is {len(ident)} bytes, at most {MAX_IDENTIFIER_BYTES} allowed"
        )
    if 0 in ident:
        raise ConfigurationError(f"Problem identifier {ident!r} contains a zero byte")
    return ident


def derive_nonce(problem_identifier, test_id: int) -> int:
    """Pack (problem identifier, test id) into the 64-bit nonce.

    test_id fills the low 32 bits; identifier byte i is OR-ed in shifted
    by 4 + i bit positions. The shifts overlap test_id and each other.
    Existing test data depends on this exact packing, so it stays as is.
    """
    ident = encode_identifier(problem_identifier)
    if isinstance(test_id, bool) or not isinstance(test_id, int):
        raise ConfigurationError(f"Test id must be an integer, got {type(test_id).__name__}")
    if test_id < 0 or test_id > U32_MAX:
        raise ConfigurationError(f"Test id {test_id} outside [0, {U32_MAX}]")

    nonce = test_id
    for i, byte in enumerate(ident):
        nonce |= byte << (4 + i)
    return nonce


def _operation(method):
    """Guard a public operation: refuse when halted, halt on any RandomError."""

    @wraps(method)
    def wrapper(self, *args, **kwargs):
        if self._state == HALTED:
            raise GeneratorHalted(f"{self!r} is halted after an earlier error")
        self._state = STREAMING
        try:
            return method(self, *args, **kwargs)
        except RandomError as e:
            self._halt(e)
            raise

    return wrapper


class Random:
    """Cryptographically strong, reproducible random generator (ChaCha20).

    Instances own mutable stream state and must not be copied or shared
    between threads; build one per (problem identifier, test id).
    """

    MIN = 0
    MAX = U32_MAX

    def __init__(self, problem_identifier, test_id: int, key=None):
        """
        Args:
            problem_identifier: str or bytes, at most 4 bytes, none of them zero.
            test_id: Test index in [0, 2^32).
            key: Eight 32-bit words. Defaults to the configured key (see utils.keys).
        """
        self.problem_identifier = encode_identifier(problem_identifier)
        self.test_id = test_id
        self.nonce = derive_nonce(self.problem_identifier, test_id)
        key = load_key() if key is None else validate_key(key)

        self._stream = StreamState(key, self.nonce)
        self._extractor = BitExtractor(self._stream)
        self._sampler = UniformSampler(self._extractor)
        self._state = FRESH

        logger.debug(
            f"Random ready: problem={self.problem_identifier!r} test_id={test_id} nonce=0x{self.nonce:016x}"
        )

    def __repr__(self) -> str:
        # No key material here
        return f"Random({self.problem_identifier!r}, {self.test_id}, state={self._state})"

    def __copy__(self):
        raise TypeError("Random instances cannot be copied; two copies would replay one stream")

    def __deepcopy__(self, memo):
        self.__copy__()

    def __reduce_ex__(self, protocol):
        raise TypeError("Random instances cannot be pickled")

    @property
    def state(self) -> str:
        """One of "fresh", "streaming", "halted"."""
        return self._state

    def _halt(self, error: RandomError) -> None:
        self._state = HALTED
        logger.error(f"{self!r} halted: {type(error).__name__}: {error}")

    @_operation
    def __call__(self) -> int:
        """Return the next 32 bits of the stream, in [Random.MIN, Random.MAX]."""
        return self._extractor.bits(32)

    @_operation
    def bits(self, n: int) -> int:
        """Return the next n bits (0 <= n <= 64) as an unsigned integer."""
        return self._extractor.bits(n)

    @_operation
    def uniform_int(self, min_value: int, max_value: int) -> int:
        """Uniform 32-bit signed integer in [min_value, max_value]."""
        return self._sampler.uniform_int(min_value, max_value)

    @_operation
    def uniform_uint(self, min_value: int, max_value: int) -> int:
        """Uniform 32-bit unsigned integer in [min_value, max_value]."""
        return self._sampler.uniform_uint(min_value, max_value)

    @_operation
    def uniform_int64(self, min_value: int, max_value: int) -> int:
        """Uniform 64-bit signed integer in [min_value, max_value]."""
        return self._sampler.uniform_int64(min_value, max_value)

    @_operation
    def uniform_uint64(self, min_value: int, max_value: int) -> int:
        """Uniform 64-bit unsigned integer in [min_value, max_value]."""
        return self._sampler.uniform_uint64(min_value, max_value)

    @_operation
    def shuffle(self, sequence) -> None:
        """Shuffle a mutable random-access sequence in place."""
        shuffle(self._sampler, sequence)
