"""Catalog REST client.

Read-only access to the storefront backend: health check and product
listing. GET responses are cached in a ``TTLCache`` owned by the client
instance (no process-wide state).
"""
from __future__ import annotations

import json
import logging
import ssl
import threading
import time
import urllib.parse
import urllib.request
from typing import Any, Callable, Dict, Hashable, List, Optional

from slideshow_generator.models import CatalogItem
from .errors import CatalogError

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 5 * 60


class TTLCache:
    """Small thread-safe mapping whose entries expire after ``ttl`` seconds."""

    def __init__(self, ttl: float = CACHE_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._data: Dict[Hashable, tuple] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, default=None):
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return default
            stored_at, value = entry
            if self.clock() - stored_at >= self.ttl:
                del self._data[key]
                return default
            return value

    def set(self, key: Hashable, value) -> None:
        with self._lock:
            self._data[key] = (self.clock(), value)

    def invalidate(self, prefix: Optional[str] = None) -> None:
        """Drop every entry, or only string keys starting with ``prefix``."""
        with self._lock:
            if prefix is None:
                self._data.clear()
            else:
                for key in [k for k in self._data if isinstance(k, str) and k.startswith(prefix)]:
                    del self._data[key]

    def __len__(self):
        return len(self._data)


def _ssl_context():
    ssl_context = ssl.create_default_context()
    ssl_context.check_hostname = False
    ssl_context.verify_mode = ssl.CERT_NONE
    return ssl_context


class CatalogClient:
    """Thin client over the storefront REST API."""

    def __init__(self, api_url: str, cache: Optional[TTLCache] = None, timeout: float = 10):
        self.api_url = api_url.rstrip('/')
        self.cache = cache if cache is not None else TTLCache()
        self.timeout = timeout

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None, use_cache: bool = True) -> Any:
        query = urllib.parse.urlencode({k: str(v).lower() if isinstance(v, bool) else v
                                        for k, v in (params or {}).items()})
        url = f"{self.api_url}{path}" + (f"?{query}" if query else "")
        if use_cache:
            cached = self.cache.get(url)
            if cached is not None:
                logger.debug("Cache hit: %s", url)
                return cached

        logger.info("GET %s", url)
        request = urllib.request.Request(url, headers={"User-Agent": "Mozilla/5.0", "Accept": "application/json"})
        try:
            with urllib.request.urlopen(request, context=_ssl_context(), timeout=self.timeout) as response:
                payload = json.loads(response.read().decode("utf-8"))
        except Exception as e:
            logger.error("Request GET %s failed: %s", url, e)
            raise CatalogError(f"Request to {path} failed: {e}")

        if use_cache:
            self.cache.set(url, payload)
        return payload

    def health_check(self) -> bool:
        """True when the backend answers its health endpoint. Never raises."""
        try:
            return bool(self._get_json("/health", use_cache=False))
        except CatalogError:
            return False

    def get_products(self, limit: int = 100, status: Optional[bool] = True) -> List[CatalogItem]:
        """Fetch the product list and convert it to ``CatalogItem`` objects."""
        params: Dict[str, Any] = {"limit": limit}
        if status is not None:
            params["status"] = status
        response = self._get_json("/products", params)
        if not isinstance(response, dict) or response.get("status") != "success":
            message = response.get("message") if isinstance(response, dict) else None
            raise CatalogError(message or "Unable to load products")

        items = []
        for entry in response.get("payload") or []:
            try:
                items.append(CatalogItem.from_dict(entry))
            except (ValueError, TypeError, ArithmeticError) as e:
                logger.warning("Skipping invalid product %s: %s", entry.get("_id") if isinstance(entry, dict) else entry, e)
        logger.info("Loaded %d products", len(items))
        return items
