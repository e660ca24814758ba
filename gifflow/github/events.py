from typing import Any, Dict, Optional

from gifflow.cache.installations import InstallationRegistry, get_registry
from gifflow.github import api
from gifflow.github.classifier import LIFECYCLE_EVENTS, classify
from gifflow.github.installations import handle_installation_event
from gifflow.logger import get_logger
from gifflow.responses.orchestrator import ResponseOrchestrator


logger = get_logger("gifflow.github.events")

_orchestrator: Optional[ResponseOrchestrator] = None


def get_orchestrator() -> ResponseOrchestrator:
    global _orchestrator

    if _orchestrator is None:
        _orchestrator = ResponseOrchestrator()

    return _orchestrator


async def handle_event(
    event_type: str,
    payload: Dict[str, Any],
    orchestrator: Optional[ResponseOrchestrator] = None,
    registry: Optional[InstallationRegistry] = None,
):
    """
    Central GitHub webhook dispatcher.

    Installation lifecycle events update the registry; everything else is
    classified into action keys and handed to the orchestrator.
    """
    if registry is None:
        registry = get_registry()

    try:
        if event_type in LIFECYCLE_EVENTS:
            client = orchestrator.client if orchestrator else api
            await handle_installation_event(event_type, payload, registry, client)
            return

        installation_id = (payload.get("installation") or {}).get("id")
        if installation_id is None:
            logger.warning("Dropping %s event without installation id", event_type)
            return

        if registry.is_suspended(installation_id):
            logger.info("Installation %s is suspended, ignoring %s", installation_id, event_type)
            return

        keys = classify(event_type, payload)
        if not keys:
            return

        logger.info(
            "Event %s classified as: %s",
            event_type,
            ", ".join(k.value for k in keys),
        )

        orchestrator = orchestrator or get_orchestrator()
        await orchestrator.dispatch(keys, payload)

    except Exception:
        # Never crash webhook processing
        logger.exception("Unhandled error while processing event: %s", event_type)
