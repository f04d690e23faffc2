"""
Identifier Generator

Ids for tasks and blockers created locally: a millisecond timestamp
plus a random base-36 suffix.
"""
import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 9


def generate_id() -> str:
    """Return a new identifier such as ``id_1718000000000_k3j9x0a2b``."""
    millis = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"id_{millis}_{suffix}"
