"""Tests for secret phrase digests and address hashing."""

import pytest

from trove.core.security import SecretHasher, hash_ip, normalize_secret


@pytest.mark.parametrize("phrase", ["pineapple", "gold", "a much longer phrase with spaces", "ünïcødé"])
def test_secret_round_trip(hasher: SecretHasher, phrase: str) -> None:
    assert hasher.verify(phrase, hasher.hash(phrase))
    assert not hasher.verify(phrase, hasher.hash(phrase + "x"))


def test_normalization_trims_and_folds_case(hasher: SecretHasher) -> None:
    assert normalize_secret("  Secret ") == "secret"
    assert hasher.verify("secret", hasher.hash(" Secret "))
    assert hasher.verify("SECRET  ", hasher.hash("secret"))


def test_digests_are_salted(hasher: SecretHasher) -> None:
    assert hasher.hash("gold") != hasher.hash("gold")


def test_digest_is_argon2id(hasher: SecretHasher) -> None:
    assert hasher.hash("gold").startswith("$argon2id$")


@pytest.mark.parametrize("digest", ["", "not-a-digest", "$argon2id$v=19$broken", None, 42])
def test_verify_never_raises_on_malformed_digest(hasher: SecretHasher, digest: object) -> None:
    assert hasher.verify("gold", digest) is False  # type: ignore[arg-type]


def test_hash_ip_is_keyed_and_stable() -> None:
    first = hash_ip("203.0.113.7", salt="salt-a")
    assert first == hash_ip("203.0.113.7", salt="salt-a")
    assert first != hash_ip("203.0.113.7", salt="salt-b")
    assert first != hash_ip("203.0.113.8", salt="salt-a")
    assert "203.0.113.7" not in first
    assert len(first) == 64
