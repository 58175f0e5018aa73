"""
SecretMatcher and digest helpers
"""

import pytest

from answer_system import (
    HashingUnavailableError,
    SecretMatcher,
    hash_answer,
    is_valid_digest,
    normalize_answer,
    verify_hashing_available,
)
from answer_system import secret_matcher
from answer_system.digest_tool import main as digest_tool_main

ABC_DIGEST = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_hash_answer_is_lowercase_hex_sha256():
    assert hash_answer("abc") == ABC_DIGEST
    assert is_valid_digest(hash_answer("anything at all"))


def test_normalize_trims_and_lowercases_but_keeps_inner_text():
    assert normalize_answer("  River  Pool\n") == "river  pool"
    assert normalize_answer("ÉCLAIR") == "éclair"


@pytest.mark.parametrize("variant", ["abc", "ABC", "  abc", "abc\t", " AbC \n"])
def test_whitespace_and_case_variants_match_same_digest(variant):
    assert SecretMatcher().matches(variant, ABC_DIGEST)


def test_inner_whitespace_is_significant():
    digest = hash_answer("river pool")
    matcher = SecretMatcher()
    assert matcher.matches("River Pool", digest)
    assert not matcher.matches("riverpool", digest)
    assert not matcher.matches("river  pool", digest)


def test_no_false_positives_across_sampled_inputs():
    matcher = SecretMatcher()
    digest = hash_answer("lantern")
    candidates = ["lantern ", "lanterns", "lanter", "", " ", "lantern x", "Lántern", "0", "lantern1"]
    for candidate in candidates:
        assert matcher.matches(candidate, digest) == (normalize_answer(candidate) == "lantern")


def test_uppercase_digest_never_matches():
    assert not SecretMatcher().matches("abc", ABC_DIGEST.upper())


def test_is_valid_digest_rejects_wrong_shapes():
    assert not is_valid_digest("abc")
    assert not is_valid_digest(ABC_DIGEST.upper())
    assert not is_valid_digest(ABC_DIGEST[:-1] + "g")


def test_verify_hashing_available_passes():
    verify_hashing_available()


def test_verify_hashing_available_fails_loudly_on_bad_digest(monkeypatch):
    monkeypatch.setattr(secret_matcher, "_KNOWN_ANSWER_DIGEST", "0" * 64)
    with pytest.raises(HashingUnavailableError):
        verify_hashing_available()


def test_digest_tool_prints_digest(capsys):
    assert digest_tool_main(["  ABC "]) == 0
    assert ABC_DIGEST in capsys.readouterr().out


def test_digest_tool_check(capsys):
    assert digest_tool_main(["--check", "abc", ABC_DIGEST]) == 0
    assert digest_tool_main(["--check", "abd", ABC_DIGEST]) == 1
    assert digest_tool_main(["--check", "abc", "nope"]) == 2
