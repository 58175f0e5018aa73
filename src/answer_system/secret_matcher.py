"""
Secret matching - compares player answers against SHA-256 digests.

Only digests are ever configured or logged; the plaintext answer exists
solely in the player's input.
"""

import hashlib


DIGEST_HEX_LENGTH = 64

# SHA-256 of b"abc" (FIPS 180-2 test vector)
_KNOWN_ANSWER_INPUT = b"abc"
_KNOWN_ANSWER_DIGEST = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


class HashingUnavailableError(RuntimeError):
    """SHA-256 is missing or broken in this interpreter - the story cannot run"""


def normalize_answer(candidate: str) -> str:
    """Strip outer whitespace and lowercase; inner characters are kept as typed"""
    return candidate.strip().lower()


def hash_answer(candidate: str) -> str:
    """
    Digest an answer the way the configuration stores it.

    Args:
        candidate: Raw player input

    Returns:
        Lowercase hex SHA-256 of the normalized UTF-8 text
    """
    return hashlib.sha256(normalize_answer(candidate).encode("utf-8")).hexdigest()


def is_valid_digest(digest: str) -> bool:
    """True for a 64-character lowercase hex string"""
    return (
        isinstance(digest, str) and
        len(digest) == DIGEST_HEX_LENGTH and
        all(ch in "0123456789abcdef" for ch in digest)
    )


def verify_hashing_available() -> None:
    """
    Startup check that SHA-256 exists and produces the reference digest.

    Raises:
        HashingUnavailableError: If hashing cannot be used
    """
    try:
        digest = hashlib.sha256(_KNOWN_ANSWER_INPUT).hexdigest()
    except (AttributeError, ValueError) as e:
        raise HashingUnavailableError(f"SHA-256 is not available: {e}") from e
    if digest != _KNOWN_ANSWER_DIGEST:
        raise HashingUnavailableError("SHA-256 returned an unexpected digest for the known-answer test")


class SecretMatcher:
    """Stateless matcher; one instance is shared by every answer slot"""

    def matches(self, candidate: str, digest: str) -> bool:
        """
        Check a candidate against a stored digest.

        Args:
            candidate: Raw player input
            digest: Expected lowercase hex SHA-256

        Returns:
            True only if the normalized candidate hashes to exactly digest
        """
        return hash_answer(candidate) == digest
