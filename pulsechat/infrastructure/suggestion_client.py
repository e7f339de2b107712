# pulsechat/infrastructure/suggestion_client.py
import logging

import httpx

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 3


class SuggestionClient:
    """Client for the external reply-suggestion endpoint.

    Any failure degrades to an empty list so a slow or broken model never
    gets in the way of sending messages.
    """

    def __init__(
        self,
        url: str | None,
        timeout: float,
        context_limit: int,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self.context_limit = context_limit
        self.transport = transport

    async def suggest(self, context: str, user_name: str | None) -> list[str]:
        if not self.url or not context.strip():
            return []

        payload = {
            "context": context[: self.context_limit],
            "userName": user_name or "User",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Reply suggestion request failed: {e!s}")
            return []

        raw = data.get("suggestions") if isinstance(data, dict) else None
        if not isinstance(raw, list):
            logger.warning("Reply suggestion response had no suggestions list")
            return []
        suggestions = [s.strip() for s in raw if isinstance(s, str) and s.strip()]
        return suggestions[:MAX_SUGGESTIONS]
