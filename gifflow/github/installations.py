from typing import Any, Dict, Optional

from gifflow.cache.installations import InstallationRegistry, get_registry
from gifflow.github import api
from gifflow.logger import get_logger


logger = get_logger("gifflow.github.installations")


async def refresh_installation(
    installation_id: int,
    registry: Optional[InstallationRegistry] = None,
    client=api,
) -> bool:
    """
    Re-list the installation's repositories and store them.

    Returns False (registry untouched) when the listing fails.
    """
    if registry is None:
        registry = get_registry()

    try:
        repos = await client.list_installation_repos(installation_id)
    except Exception:
        logger.exception("Failed to list repositories for installation %s", installation_id)
        return False

    registry.upsert(installation_id, repos)
    return True


async def handle_installation_event(
    event_type: str,
    payload: Dict[str, Any],
    registry: Optional[InstallationRegistry] = None,
    client=api,
):
    if registry is None:
        registry = get_registry()
    action = payload.get("action")
    installation_id = (payload.get("installation") or {}).get("id")

    if installation_id is None:
        return

    logger.info("Handling %s/%s for installation %s", event_type, action, installation_id)

    if event_type == "installation":
        if action == "deleted":
            registry.remove(installation_id)
            return

        if action == "suspend":
            registry.set_suspended(installation_id, True)
            return

        if action == "unsuspend":
            registry.set_suspended(installation_id, False)
            return

        if action == "created" and payload.get("repositories") is not None:
            registry.upsert(installation_id, payload["repositories"])

        await refresh_installation(installation_id, registry, client)
        return

    if event_type == "installation_repositories":
        if await refresh_installation(installation_id, registry, client):
            return

        # Listing failed: apply the delta carried by the webhook
        registry.add_repos(installation_id, payload.get("repositories_added"))
        registry.remove_repos(installation_id, payload.get("repositories_removed"))
