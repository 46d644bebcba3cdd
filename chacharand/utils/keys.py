"""
Key provisioning for chacharand.

The keystream key is eight 32-bit words, supplied out of band. The
environment variable named in config.yaml (key.env_var) takes priority;
otherwise the key.words list from config.yaml is used.

Usage:
    from chacharand.utils.keys import load_key
    key = load_key()            # env var or config value
    key = parse_key_hex(hex64)  # explicit 64-hex-digit key

Key words are never logged or printed.
"""

import os
from chacharand.utils.config import config_section
from chacharand.generators.errors import ConfigurationError

KEY_WORDS = 8
WORD_MASK = 0xFFFFFFFF


def validate_key(words) -> tuple:
    """Check a key is eight integers in [0, 2^32) and return it as a tuple."""
    try:
        key = tuple(int(w) for w in words)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Key must be a sequence of integers: {e}") from None

    if len(key) != KEY_WORDS:
        raise ConfigurationError(f"Key must have {KEY_WORDS} words, got {len(key)}")
    if any(w < 0 or w > WORD_MASK for w in key):
        raise ConfigurationError("Key words must be 32-bit unsigned integers")
    return key


def parse_key_hex(text: str) -> tuple:
    """Parse a 64-hex-digit key, most significant word first.

    Whitespace is ignored, so both `d2ee7398c1963d5c...` and the
    `hexdump -e '4/4 "0x%08X, "'` style grouped output work once the
    commas and 0x prefixes are stripped.
    """
    digits = "".join(text.replace(",", " ").replace("0x", "").replace("0X", "").split())
    if len(digits) != KEY_WORDS * 8:
        raise ConfigurationError(f"Key must be {KEY_WORDS * 8} hex digits, got {len(digits)}")
    try:
        words = [int(digits[i:i + 8], 16) for i in range(0, len(digits), 8)]
    except ValueError:
        raise ConfigurationError("Key contains non-hex characters") from None
    return validate_key(words)


def load_key(config: dict | None = None) -> tuple:
    """Resolve the process-wide key.

    Args:
        config: Configuration dict. If None, loads from default config.yaml.

    Returns:
        Tuple of eight 32-bit words.
    """
    key_cfg = config_section("key", config)

    env_var = key_cfg.get("env_var")
    if env_var and os.environ.get(env_var):
        return parse_key_hex(os.environ[env_var])

    words = key_cfg.get("words")
    if words is None:
        raise ConfigurationError(
            f"No key configured: set ${env_var or 'CHACHARAND_KEY'} or key.words in config.yaml"
        )
    return validate_key(words)
