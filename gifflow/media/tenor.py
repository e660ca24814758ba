from typing import Optional

import httpx

from gifflow import settings
from gifflow.logger import get_logger


logger = get_logger("gifflow.media.tenor")


class TenorResolver:
    """
    Resolves a mood/topic term to a Tenor GIF URL.

    `resolve` returns None when nothing was found or the API failed.
    """

    def __init__(
        self,
        api_key: Optional[str] = settings.TENOR_API_KEY,
        client_key: Optional[str] = settings.TENOR_CLIENT_KEY,
        gif_settings: settings.GifSettings = settings.GIF_SETTINGS,
        url: str = settings.TENOR_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.client_key = client_key
        self.gif_settings = gif_settings
        self.url = url
        self._transport = transport

    def _params(self, term: str) -> dict:
        params = {
            "q": term,
            "key": self.api_key,
            "limit": self.gif_settings.limit,
            "media_filter": "mediumgif",
        }
        if self.client_key:
            params["client_key"] = self.client_key
        if self.gif_settings.randomised:
            params["random"] = "true"
        return params

    async def resolve(self, term: str) -> Optional[str]:
        if not self.api_key:
            return None

        try:
            async with httpx.AsyncClient(
                timeout=settings.HTTP_TIMEOUT_SECONDS,
                transport=self._transport,
            ) as client:
                response = await client.get(self.url, params=self._params(term))
            response.raise_for_status()
            results = response.json().get("results") or []
        except (httpx.HTTPError, ValueError):
            logger.exception("Error fetching gif for %r", term)
            return None

        if not results:
            logger.info("No gif found for %r", term)
            return None

        gif = (results[0].get("media_formats") or {}).get("mediumgif") or {}
        return gif.get("url") or None
