"""
Trust-Center Enrichment

Looks up a client's public trust center in the trustlists.org registry by website domain.
The registry list is fetched once and reused for a TTL; when a refresh fails the last
good list keeps being served.
"""

import re
import time
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

import httpx
from loguru import logger
from pydantic import BaseModel

DEFAULT_REGISTRY_URL = "https://trustlists.org/api/trust-centers.json"
DEFAULT_CACHE_TTL_SECONDS = 7 * 24 * 60 * 60

_SCHEME_AND_WWW = re.compile(r"^(https?://)?(www\.)?")


class TrustCenterMatch(BaseModel):
    """Result of a trust-center lookup."""

    found: bool = False
    trust_center_url: Optional[str] = None
    platform: Optional[str] = None
    company_name: Optional[str] = None


def clean_domain(url: Optional[str]) -> Optional[str]:
    """Lowercase, strip scheme and ``www.``, cut at the first ``/``."""
    if not url:
        return None
    domain = _SCHEME_AND_WWW.sub("", url.strip().lower()).split("/")[0].strip()
    return domain or None


class TrustCenterRegistry:
    """
    Client for the public trust-center registry.

    Args:
        registry_url: URL of the registry JSON document
        cache_ttl_seconds: How long a fetched list is reused
        timeout: HTTP timeout for the registry fetch
        transport: Optional httpx transport (tests pass an httpx.MockTransport)
    """

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.registry_url = registry_url
        self.cache_ttl_seconds = cache_ttl_seconds
        self.timeout = timeout
        self._transport = transport
        self._entries: Optional[List[Dict[str, Any]]] = None
        self._fetched_at: float = 0.0

    async def _fetch_entries(self) -> List[Dict[str, Any]]:
        if self._entries is not None and time.monotonic() - self._fetched_at < self.cache_ttl_seconds:
            return self._entries

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.registry_url)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                "Trust-center registry fetch failed, serving cached list",
                registry_url=self.registry_url,
                cached_entries=len(self._entries or []),
                error=str(e),
            )
            return self._entries or []

        self._entries = payload.get("data", []) if isinstance(payload, dict) else []
        self._fetched_at = time.monotonic()
        logger.debug("Trust-center registry refreshed", entries=len(self._entries))
        return self._entries

    async def lookup(self, website_url: Optional[str]) -> TrustCenterMatch:
        """Find the trust center whose website has the same domain as ``website_url``."""
        domain = clean_domain(website_url)
        if not domain:
            return TrustCenterMatch()

        for entry in await self._fetch_entries():
            if clean_domain(entry.get("website")) == domain:
                return TrustCenterMatch(
                    found=True,
                    trust_center_url=entry.get("trustCenter"),
                    platform=entry.get("platform"),
                    company_name=entry.get("name"),
                )

        return TrustCenterMatch()
