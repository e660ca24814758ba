import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import httpx
import jwt

from gifflow import settings
from gifflow.logger import get_logger


logger = get_logger("gifflow.github.auth")


class CredentialUnavailable(RuntimeError):
    """
    Raised when no app assertion has ever been minted successfully.
    """
    pass


@dataclass(frozen=True)
class Credential:
    assertion: str
    issued_at: float
    expires_at: float

    def remaining(self, now: float) -> float:
        return self.expires_at - now


Signer = Callable[[Dict[str, Any]], str]


class AppCredentialManager:
    """
    Owns the process-wide GitHub App JWT.

    Renewal replaces the Credential object under a lock, never mutates it,
    so callers holding the previous value keep a token that stays valid
    until its own expiry.
    """

    def __init__(
        self,
        app_id: Optional[str],
        private_key_loader: Callable[[], Optional[str]] = settings.read_private_key,
        ttl: int = settings.JWT_TTL_SECONDS,
        margin: int = settings.JWT_RENEW_MARGIN_SECONDS,
        backdate: int = settings.JWT_BACKDATE_SECONDS,
        exp_skew: int = settings.JWT_EXP_SKEW_SECONDS,
        clock: Callable[[], float] = time.time,
        signer: Optional[Signer] = None,
    ):
        self._app_id = app_id
        self._private_key_loader = private_key_loader
        self._private_key: Optional[str] = None
        self._ttl = ttl
        self._margin = margin
        self._backdate = backdate
        self._exp_skew = min(exp_skew, max(margin - 1, 0))
        self._clock = clock
        self._signer = signer or self._sign_rs256
        self._lock = threading.Lock()
        self._credential: Optional[Credential] = None

    def _sign_rs256(self, claims: Dict[str, Any]) -> str:
        if self._private_key is None:
            self._private_key = self._private_key_loader()
        if not self._private_key:
            raise RuntimeError("GitHub App private key is not configured")
        return jwt.encode(claims, self._private_key, algorithm="RS256")

    def _mint(self, now: float) -> Credential:
        if not self._app_id:
            raise RuntimeError("GITHUB_APP_ID is not set")

        claims = {
            "iat": int(now) - self._backdate,
            "exp": int(now) + self._ttl - self._exp_skew,
            "iss": str(self._app_id),
        }
        return Credential(
            assertion=self._signer(claims),
            issued_at=now,
            expires_at=now + self._ttl,
        )

    def needs_renewal(self, now: Optional[float] = None) -> bool:
        credential = self._credential
        if credential is None:
            return True
        now = self._clock() if now is None else now
        return credential.remaining(now) <= self._margin

    def ensure_fresh(self) -> bool:
        """
        Renew the assertion if it is missing or inside the safety margin.

        Returns True when a new assertion was minted. Signing failures are
        logged and the previous credential is kept for the next attempt.
        """
        if not self.needs_renewal():
            return False

        with self._lock:
            now = self._clock()
            # Another caller may have renewed while we waited
            if not self.needs_renewal(now):
                return False

            try:
                credential = self._mint(now)
            except Exception:
                logger.exception("GitHub App JWT renewal failed; keeping previous credential")
                return False

            self._credential = credential

        logger.info("GitHub App JWT renewed, expires in %ss", self._ttl)
        return True

    def current(self) -> Credential:
        """
        Return the current credential, minting one on first use.
        """
        self.ensure_fresh()

        credential = self._credential
        if credential is None:
            raise CredentialUnavailable("No GitHub App JWT could be minted")
        return credential

    def current_assertion(self) -> str:
        return self.current().assertion


_manager: Optional[AppCredentialManager] = None


def get_credential_manager() -> AppCredentialManager:
    """
    Return the process-wide credential manager.

    Lazily initialized and reused across the app.
    """
    global _manager

    if _manager is None:
        _manager = AppCredentialManager(settings.GITHUB_APP_ID)

    return _manager


def app_headers(manager: Optional[AppCredentialManager] = None) -> dict[str, str]:
    manager = manager or get_credential_manager()
    return {
        "Authorization": f"Bearer {manager.current_assertion()}",
        "Accept": "application/vnd.github+json",
    }


async def get_installation_token(
    installation_id: int,
    manager: Optional[AppCredentialManager] = None,
) -> str:
    """
    Exchange the app assertion for an installation access token.

    Not cached: every call derives a fresh token from the current JWT.
    """
    headers = app_headers(manager)

    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
        token_resp = await client.post(
            f"{settings.GITHUB_API_URL}/app/installations/{installation_id}/access_tokens",
            headers=headers,
        )
        token_resp.raise_for_status()

    return token_resp.json()["token"]
