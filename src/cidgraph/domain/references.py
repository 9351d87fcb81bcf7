"""Content reference validation and conversion.

References are CIDs. On-chain submissions carry only the 32-byte sha2-256
digest, which maps to a CIDv1 with the ``raw`` codec in base32.
"""

from __future__ import annotations

import re
from typing import Final

from multiformats import CID, multihash

from .errors import InvalidReferenceError

MIN_REFERENCE_LENGTH: Final[int] = 46
_HEX_DIGEST = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")


def is_valid_reference(reference: object) -> bool:
    """Return whether ``reference`` is a parseable CID of plausible length.

    Never raises: anything else simply is not a reference, which lets callers
    tell link targets apart from file-path targets.
    """

    if not isinstance(reference, str) or len(reference) < MIN_REFERENCE_LENGTH:
        return False
    try:
        CID.decode(reference)
    except (ValueError, KeyError, TypeError):
        return False
    return True


def require_reference(reference: str) -> str:
    if not is_valid_reference(reference):
        raise InvalidReferenceError(reference)
    return reference


def is_hex_digest(value: str) -> bool:
    return bool(_HEX_DIGEST.match(value))


def hex_to_reference(hex_digest: str) -> str:
    """Convert a 32-byte hex sha2-256 digest into a CIDv1 (raw, base32)."""

    if not is_hex_digest(hex_digest):
        raise InvalidReferenceError(hex_digest)
    digest = bytes.fromhex(hex_digest.removeprefix("0x"))
    cid = CID("base32", 1, "raw", multihash.wrap(digest, "sha2-256"))
    return str(cid)


def reference_to_hex(reference: str) -> str:
    """Return the ``0x``-prefixed digest carried by a CIDv1 raw sha2-256 reference."""

    require_reference(reference)
    cid = CID.decode(reference)
    if cid.version != 1 or cid.codec.name != "raw" or cid.hashfun.name != "sha2-256":
        raise InvalidReferenceError(reference)
    return "0x" + bytes(cid.raw_digest).hex()


def normalize_key(key: str) -> str:
    """Return ``key`` as a reference, converting hex digests when needed."""

    if is_hex_digest(key):
        return hex_to_reference(key)
    return require_reference(key)
