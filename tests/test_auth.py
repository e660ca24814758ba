from __future__ import annotations

from typing import Any

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from gifflow.github.auth import AppCredentialManager, CredentialUnavailable


class Clock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class CountingSigner:
    def __init__(self) -> None:
        self.claims: list[dict[str, Any]] = []
        self.fail = False

    def __call__(self, claims: dict[str, Any]) -> str:
        if self.fail:
            raise ValueError("bad key")
        self.claims.append(claims)
        return f"jwt-{len(self.claims)}"


def _manager(clock: Clock, signer: CountingSigner) -> AppCredentialManager:
    return AppCredentialManager("12345", ttl=600, margin=30, backdate=60, clock=clock, signer=signer)


def test_first_use_mints_an_assertion() -> None:
    clock, signer = Clock(), CountingSigner()
    manager = _manager(clock, signer)

    credential = manager.current()

    assert credential.assertion == "jwt-1"
    assert credential.expires_at == clock.now + 600
    assert signer.claims[0] == {
        "iat": int(clock.now) - 60,
        "exp": int(clock.now) + 600 - 10,
        "iss": "12345",
    }


def test_ensure_fresh_keeps_assertion_outside_margin() -> None:
    clock, signer = Clock(), CountingSigner()
    manager = _manager(clock, signer)
    before = manager.current()

    clock.now += 600 - 31

    assert manager.ensure_fresh() is False
    assert manager.current() is before
    assert manager.current_assertion() == "jwt-1"


def test_ensure_fresh_renews_inside_margin() -> None:
    clock, signer = Clock(), CountingSigner()
    manager = _manager(clock, signer)
    before = manager.current()

    clock.now += 600 - 30

    assert manager.ensure_fresh() is True
    after = manager.current()
    assert after.assertion != before.assertion
    assert after.expires_at > before.expires_at
    # The replaced credential object is left untouched for in-flight callers
    assert before.assertion == "jwt-1"


def test_failed_renewal_keeps_previous_credential() -> None:
    clock, signer = Clock(), CountingSigner()
    manager = _manager(clock, signer)
    before = manager.current()

    clock.now += 590
    signer.fail = True

    assert manager.ensure_fresh() is False
    assert manager.current() is before

    signer.fail = False
    assert manager.ensure_fresh() is True


def test_no_credential_ever_minted_raises() -> None:
    signer = CountingSigner()
    signer.fail = True
    manager = _manager(Clock(), signer)

    with pytest.raises(CredentialUnavailable):
        manager.current_assertion()


def test_missing_app_id_is_not_fatal_to_renewal() -> None:
    manager = AppCredentialManager(None, clock=Clock(), signer=CountingSigner())

    assert manager.ensure_fresh() is False


def test_rs256_assertion_verifies_with_public_key() -> None:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )

    manager = AppCredentialManager("42", private_key_loader=lambda: pem)
    claims = jwt.decode(manager.current_assertion(), public_pem, algorithms=["RS256"])

    assert claims["iss"] == "42"
    assert claims["exp"] - claims["iat"] == 600 - 10 + 60


def test_malformed_key_is_logged_not_raised() -> None:
    manager = AppCredentialManager("42", private_key_loader=lambda: "not a pem")

    assert manager.ensure_fresh() is False


def test_caller_waiting_on_lock_does_not_mint_again() -> None:
    clock, signer = Clock(), CountingSigner()
    manager = _manager(clock, signer)
    manager.current()
    clock.now += 590

    class RenewedWhileWaiting:
        """Another caller holds the lock and renews before we get it."""

        def __enter__(self) -> None:
            manager._credential = manager._mint(clock.now)

        def __exit__(self, *exc: Any) -> bool:
            return False

    manager._lock = RenewedWhileWaiting()  # type: ignore[assignment]

    assert manager.ensure_fresh() is False
    assert len(signer.claims) == 2
    assert manager.current_assertion() == "jwt-2"


def test_signed_exp_stays_inside_renewal_margin() -> None:
    clock, signer = Clock(), CountingSigner()
    credential = _manager(clock, signer).current()

    signed_exp = signer.claims[0]["exp"]

    assert signed_exp < credential.expires_at
    assert credential.expires_at - signed_exp < 30
