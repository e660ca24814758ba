from typing import Optional

from gifflow.cache.installations import InstallationRegistry, get_registry
from gifflow.github import api
from gifflow.github.installations import refresh_installation
from gifflow.logger import get_logger


logger = get_logger("gifflow.workers.installations")


async def reconcile_on_startup(
    registry: Optional[InstallationRegistry] = None,
    client=api,
) -> int:
    """
    Rebuild the installation registry from the forge after a restart.

    Returns the number of installations restored.
    """
    if registry is None:
        registry = get_registry()

    try:
        installations = await client.list_app_installations()
    except Exception:
        logger.exception("Startup reconciliation failed")
        return 0

    restored = 0
    for installation in installations:
        installation_id = installation.get("id")
        if installation_id is None:
            continue

        if await refresh_installation(installation_id, registry, client):
            restored += 1

        if installation.get("suspended_at"):
            registry.set_suspended(installation_id, True)

    logger.info("Restored %d installations", restored)
    return restored
