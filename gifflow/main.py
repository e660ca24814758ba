from gifflow import settings  # load .env
from fastapi import FastAPI, Request, Header, HTTPException
from contextlib import asynccontextmanager
import asyncio
import json

from gifflow.security.webhook_verify import verify_signature
from gifflow.github.events import handle_event
from gifflow.logger import get_logger
from gifflow.workers.credential_refresher import credential_refresh_loop
from gifflow.workers.installation_sync import reconcile_on_startup


logger = get_logger()

_refresher_task: asyncio.Task | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _refresher_task

    # Unreadable signing key is the one fatal condition
    settings.validate_github_settings()
    settings.validate_media_settings()

    _refresher_task = asyncio.create_task(credential_refresh_loop())
    logger.info("Credential refresher started")

    await reconcile_on_startup()

    try:
        yield
    finally:
        if _refresher_task:
            _refresher_task.cancel()
            try:
                await _refresher_task
            except asyncio.CancelledError:
                pass
            logger.info("Credential refresher stopped")


app = FastAPI(lifespan=lifespan)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/webhook")
async def github_webhook(
    request: Request,
    x_hub_signature_256: str | None = Header(None),
    x_github_event: str | None = Header(None),
):
    body = await request.body()

    if not x_hub_signature_256:
        raise HTTPException(status_code=401, detail="Missing signature header")

    if not verify_signature(body, x_hub_signature_256):
        raise HTTPException(status_code=401, detail="Invalid signature")

    if not x_github_event:
        raise HTTPException(status_code=400, detail="Missing GitHub event header")

    try:
        payload = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    installation_id = (
        (payload.get("installation") or {}).get("id")
        if isinstance(payload, dict)
        else None
    )
    if not installation_id:
        logger.error("Installation ID is missing from the %s payload", x_github_event)
        raise HTTPException(status_code=400, detail="Installation ID is missing")

    logger.info("Received GitHub event: %s (installation %s)", x_github_event, installation_id)

    await handle_event(x_github_event, payload)
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "gifflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=False,
    )
