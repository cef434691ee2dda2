"""Unit tests for password hashing utilities."""

from src.lm_gateway.auth.password import hash_password, verify_password


def test_hash_is_not_plain():
    hashed = hash_password("Shop2Keeper")
    assert hashed != "Shop2Keeper"
    assert hashed.startswith("$2")


def test_verify_round_trip():
    hashed = hash_password("Shop2Keeper")
    assert verify_password("Shop2Keeper", hashed) is True
    assert verify_password("shop2keeper", hashed) is False


def test_salt_differs_per_hash():
    assert hash_password("Shop2Keeper") != hash_password("Shop2Keeper")
