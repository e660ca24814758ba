import asyncio
from typing import Optional

from gifflow.github.auth import AppCredentialManager, get_credential_manager
from gifflow.logger import get_logger
from gifflow.settings import JWT_CHECK_INTERVAL_SECONDS


logger = get_logger("gifflow.workers.credentials")


async def credential_refresh_loop(
    manager: Optional[AppCredentialManager] = None,
    interval: float = JWT_CHECK_INTERVAL_SECONDS,
):
    """
    Check the app JWT on a fixed cadence and renew it near expiry.

    A failed renewal keeps the previous JWT until the next tick.
    """
    manager = manager or get_credential_manager()

    while True:
        try:
            manager.ensure_fresh()
        except asyncio.CancelledError:
            logger.info("Credential refresher cancelled")
            raise
        except Exception:
            logger.exception("Credential refresher error")

        await asyncio.sleep(interval)
