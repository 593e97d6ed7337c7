"""Resolve federated actor DIDs to their public handles."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable

import httpx

from app.config import get_settings

logger = logging.getLogger(__name__)

_HANDLE_PREFIX = "at://"


class ActorHandleCache:
    """Thread-safe TTL cache in front of the PLC directory.

    A DID that cannot be resolved is returned unchanged and is not cached, so
    the next read tries again.
    """

    def __init__(
        self,
        *,
        directory_url: str | None = None,
        ttl_seconds: int | None = None,
        timeout_seconds: float | None = None,
        client: httpx.Client | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        settings = get_settings()
        self._directory_url = (directory_url or settings.plc_directory_url).rstrip("/")
        self._ttl_seconds = ttl_seconds or settings.handle_cache_ttl_seconds
        timeout = timeout_seconds or settings.handle_resolution_timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout))
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[str, float]] = {}

    def resolve_handle(self, did: str | None) -> str | None:
        if not did or not did.startswith("did:"):
            return did

        cached = self._get_cached(did)
        if cached is not None:
            return cached

        handle = self._fetch_handle(did)
        if handle is None:
            return did

        with self._lock:
            self._entries[did] = (handle, self._clock() + self._ttl_seconds)
        return handle

    def resolve_handles(self, dids: Iterable[str]) -> dict[str, str]:
        """Resolve each distinct DID once; unresolved DIDs map to themselves."""

        resolved: dict[str, str] = {}
        for did in dict.fromkeys(dids):
            if did:
                resolved[did] = self.resolve_handle(did) or did
        return resolved

    def invalidate(self, did: str) -> None:
        with self._lock:
            self._entries.pop(did, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _get_cached(self, did: str) -> str | None:
        with self._lock:
            entry = self._entries.get(did)
            if entry is None:
                return None
            handle, expires_at = entry
            if expires_at <= self._clock():
                del self._entries[did]
                return None
            return handle

    def _fetch_handle(self, did: str) -> str | None:
        try:
            response = self._client.get(f"{self._directory_url}/{did}")
            response.raise_for_status()
            document = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Could not resolve handle for %s: %s", did, exc)
            return None

        aliases = document.get("alsoKnownAs") if isinstance(document, dict) else None
        for alias in aliases or []:
            if isinstance(alias, str) and alias.startswith(_HANDLE_PREFIX):
                return alias[len(_HANDLE_PREFIX):]

        logger.warning("DID document for %s lists no handle", did)
        return None


_handle_cache: ActorHandleCache | None = None
_handle_cache_lock = threading.Lock()


def get_handle_cache() -> ActorHandleCache:
    """Return the process-wide handle cache, creating it on first use."""

    global _handle_cache
    with _handle_cache_lock:
        if _handle_cache is None:
            _handle_cache = ActorHandleCache()
        return _handle_cache


def close_handle_cache() -> None:
    global _handle_cache
    with _handle_cache_lock:
        if _handle_cache is not None:
            _handle_cache.close()
            _handle_cache = None


__all__ = ["ActorHandleCache", "close_handle_cache", "get_handle_cache"]
