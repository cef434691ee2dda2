"""Unit tests for lm_gateway Pydantic schemas."""

import pytest
from pydantic import ValidationError

from src.lm_gateway.user.schemas import RegisterRequest


class TestRegisterRequest:
    def test_defaults_to_customer(self) -> None:
        req = RegisterRequest(username="alice", email="alice@example.com", password="SecureP4ss")
        assert req.role == "customer"
        assert req.latitude is None

    def test_shopkeeper_with_location(self) -> None:
        req = RegisterRequest(
            username="kirana_raj",
            email="raj@example.com",
            password="SecureP4ss",
            role="shopkeeper",
            latitude=19.07,
            longitude=72.87,
        )
        assert req.role == "shopkeeper"

    def test_unknown_role_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(username="alice", email="a@b.com", password="SecureP4ss", role="admin")

    def test_half_a_location_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(username="alice", email="a@b.com", password="SecureP4ss", latitude=10.0)

    def test_latitude_out_of_range(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(
                username="alice", email="a@b.com", password="SecureP4ss",
                latitude=91.0, longitude=0.0,
            )

    def test_username_invalid_chars(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(username="alice!", email="a@b.com", password="SecureP4ss")

    def test_invalid_email(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(username="alice", email="not-an-email", password="SecureP4ss")

    @pytest.mark.parametrize("password", ["Ab1", "alllower1", "ALLUPPER1", "NoDigitPass"])
    def test_weak_passwords(self, password: str) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(username="alice", email="a@b.com", password=password)
