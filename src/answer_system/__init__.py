"""
Answer System Package

Digest-based answer verification with wrong-answer feedback.
"""

from .secret_matcher import (
    SecretMatcher,
    HashingUnavailableError,
    hash_answer,
    normalize_answer,
    is_valid_digest,
    verify_hashing_available,
)
from .answer_gate import AnswerGate, AnswerResult

__all__ = [
    'SecretMatcher',
    'HashingUnavailableError',
    'hash_answer',
    'normalize_answer',
    'is_valid_digest',
    'verify_hashing_available',
    'AnswerGate',
    'AnswerResult'
]
