"""
Collection sources following the gold standard pattern.

Pattern: Protocol -> Production impl -> Test double -> Factory

This module contains:
1. HttpCollectionSource - static JSON served over HTTP (production)
2. LocalCollectionSource - the same files on disk
3. InMemoryCollectionSource - dicts in memory (testing/development)
4. get_collection_source() - Factory function

Sources only fetch and decode. Turning records into documents and deciding
which failures are fatal is RagService's job.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import requests

from audit_rag.config import RagConfig
from audit_rag.core import CollectionLoadError, ErrorCategory

logger = logging.getLogger(__name__)


def _exam_name(year: int) -> str:
    return f"exams/{year}"


def _require_list(name: str, data: Any) -> list[dict[str, Any]]:
    if not isinstance(data, list):
        raise CollectionLoadError(
            name, ErrorCategory.PARSE, f"expected a JSON array, got {type(data).__name__}"
        )
    return data


def _exam_list(name: str, data: Any) -> list[dict[str, Any]]:
    # Year files are either a bare array of exams or {"metadata": ..., "exams": [...]}
    if isinstance(data, dict) and "exams" in data:
        data = data["exams"]
    return _require_list(name, data)


# ---------------------------------------------------------------------------
# HTTP SOURCE (Production)
# ---------------------------------------------------------------------------


class HttpCollectionSource:
    """
    Fetch collections from a static file host.

    requests is blocking, so every GET runs in a worker thread via
    asyncio.to_thread and the event loop stays free for the other fetches.
    """

    name = "http"

    def __init__(
        self,
        config: RagConfig,
        session: requests.Session | None = None,
    ):
        """
        Args:
            config: Supplies base_url, relative paths and timeout
            session: Injected session (a fresh one if not provided)
        """
        if not config.base_url:
            raise ValueError("HttpCollectionSource requires config.base_url")
        self.config = config
        self._session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _get_json(self, name: str, path: str, missing_ok: bool = False) -> Any:
        url = self._url(path)
        try:
            response = self._session.get(url, timeout=self.config.request_timeout)
        except requests.RequestException as e:
            raise CollectionLoadError(name, ErrorCategory.NETWORK, str(e)) from e

        if missing_ok and response.status_code == 404:
            return None

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise CollectionLoadError(name, ErrorCategory.NETWORK, str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            raise CollectionLoadError(name, ErrorCategory.PARSE, f"{url}: {e}") from e

    async def fetch_collection(self, name: str) -> list[dict[str, Any]]:
        path = self.config.collection_paths().get(name)
        if path is None:
            raise CollectionLoadError(name, ErrorCategory.UNKNOWN, "unknown collection")
        data = await asyncio.to_thread(self._get_json, name, path)
        return _require_list(name, data)

    async def fetch_exam_year(self, year: int) -> list[dict[str, Any]] | None:
        name = _exam_name(year)
        path = self.config.exam_path_template.format(year=year)
        data = await asyncio.to_thread(self._get_json, name, path, True)
        if data is None:
            return None
        return _exam_list(name, data)

    def close(self) -> None:
        self._session.close()


# ---------------------------------------------------------------------------
# LOCAL SOURCE
# ---------------------------------------------------------------------------


class LocalCollectionSource:
    """Read the same relative paths from a directory."""

    name = "local"

    def __init__(self, config: RagConfig):
        if not config.data_dir:
            raise ValueError("LocalCollectionSource requires config.data_dir")
        self.config = config
        self.root = Path(config.data_dir)

    def _read_json(self, name: str, path: Path) -> Any:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise CollectionLoadError(name, ErrorCategory.UNKNOWN, str(e)) from e
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise CollectionLoadError(name, ErrorCategory.PARSE, f"{path}: {e}") from e

    async def fetch_collection(self, name: str) -> list[dict[str, Any]]:
        relative = self.config.collection_paths().get(name)
        if relative is None:
            raise CollectionLoadError(name, ErrorCategory.UNKNOWN, "unknown collection")
        data = await asyncio.to_thread(self._read_json, name, self.root / relative)
        return _require_list(name, data)

    async def fetch_exam_year(self, year: int) -> list[dict[str, Any]] | None:
        name = _exam_name(year)
        path = self.root / self.config.exam_path_template.format(year=year)
        if not path.exists():
            return None
        data = await asyncio.to_thread(self._read_json, name, path)
        return _exam_list(name, data)


# ---------------------------------------------------------------------------
# IN-MEMORY SOURCE (Testing)
# ---------------------------------------------------------------------------


class InMemoryCollectionSource:
    """
    In-memory source for tests and the bundled sample data.

    `failures` maps a collection name ("procedures", "standards") or an exam
    year to the exception its fetch should raise.
    """

    name = "memory"

    def __init__(
        self,
        procedures: list[dict[str, Any]] | None = None,
        standards: list[dict[str, Any]] | None = None,
        exams: dict[int, list[dict[str, Any]]] | None = None,
        failures: dict[str | int, Exception] | None = None,
        delay: float = 0.0,
    ):
        self._collections = {
            "procedures": procedures or [],
            "standards": standards or [],
        }
        self._exams = exams or {}
        self._failures = failures or {}
        self._delay = delay
        self.fetch_count = 0

    async def fetch_collection(self, name: str) -> list[dict[str, Any]]:
        self.fetch_count += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if name in self._failures:
            raise self._failures[name]
        if name not in self._collections:
            raise CollectionLoadError(name, ErrorCategory.UNKNOWN, "unknown collection")
        return list(self._collections[name])

    async def fetch_exam_year(self, year: int) -> list[dict[str, Any]] | None:
        if year in self._failures:
            raise self._failures[year]
        exams = self._exams.get(year)
        return list(exams) if exams is not None else None


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_collection_source(
    config: RagConfig | None = None,
) -> HttpCollectionSource | LocalCollectionSource | InMemoryCollectionSource:
    """
    Factory function to get the appropriate collection source.

    Precedence: base_url (HTTP), then data_dir (local files), then the
    bundled sample collections.
    """
    if config is None:
        from audit_rag.config import get_config

        config = get_config()

    if config.base_url:
        logger.debug("Using HTTP collections at %s", config.base_url)
        return HttpCollectionSource(config)
    if config.data_dir:
        logger.debug("Using local collections in %s", config.data_dir)
        return LocalCollectionSource(config)

    from audit_rag.retrieval.seeds import get_sample_source

    logger.debug("No collection location configured, using bundled samples")
    return get_sample_source()
