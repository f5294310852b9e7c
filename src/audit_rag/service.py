"""
RAG orchestrator.

RagService owns the loaded collections and is the single entry point the
tutor and KAM features call:

    service = RagService()
    result = await service.search_all("KSA 200 관련 질문입니다", ["감사"])
    prompt += result.context

Lifecycle is an explicit state machine:

    UNINITIALIZED -> LOADING -> READY
                             -> FAILED -> (retry) LOADING

Concurrent initialize() calls while LOADING await the same in-flight task.
Collections live in one immutable CollectionSnapshot. reload() builds a new
snapshot and swaps the reference in a single assignment, so searches that
already grabbed the old snapshot finish against consistent data.

Create one service at startup and pass it to whatever needs search.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, TypeVar

from audit_rag.config import RagConfig, get_config
from audit_rag.core import (
    CollectionLoadError,
    CollectionSource,
    ErrorCategory,
    RagInitializationError,
    SearchAllResult,
)
from audit_rag.observability import get_tracer
from audit_rag.observability.attributes import (
    RAG_ERROR_CATEGORY,
    RAG_KEYWORD_COUNT,
    RAG_KEYWORDS,
    RAG_QUERY,
    RAG_SOURCE,
    collection_attributes,
    search_result_attributes,
)
from audit_rag.observability.config import get_config as get_tracing_config
from audit_rag.retrieval.context import format_as_context
from audit_rag.retrieval.document import ExamFile, ExamSubQuestion, Procedure, Standard
from audit_rag.retrieval.scoring import expand_keywords, extract_keywords, merge_keywords
from audit_rag.retrieval.searchers import (
    DEFAULT_EXAM_LIMIT,
    DEFAULT_PROCEDURE_LIMIT,
    DEFAULT_STANDARD_LIMIT,
    flatten_exams,
    search_exam_questions,
    search_procedures,
    search_standards,
)
from audit_rag.retrieval.sources import get_collection_source

logger = logging.getLogger(__name__)

DEFAULT_SITUATION_LIMIT = 5

T = TypeVar("T")


class ServiceState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class CollectionSnapshot:
    """All loaded collections at one point in time."""

    procedures: tuple[Procedure, ...] = ()
    standards: tuple[Standard, ...] = ()
    exam_files: tuple[ExamFile, ...] = ()
    loaded_at: datetime | None = None

    @property
    def exam_years(self) -> list[int]:
        return [exam_file.year for exam_file in self.exam_files]


def _build_documents(
    name: str,
    records: list[Any],
    factory: Callable[[dict[str, Any]], T],
) -> tuple[T, ...]:
    if any(not isinstance(record, dict) for record in records):
        raise CollectionLoadError(name, ErrorCategory.PARSE, "every record must be a JSON object")
    return tuple(factory(record) for record in records)


class RagService:
    """
    Lazily loaded, read-only search over procedures, standards and exams.

    Dependencies are INJECTED: pass an InMemoryCollectionSource in tests,
    or leave `source` empty to pick one from configuration.
    """

    def __init__(
        self,
        source: CollectionSource | None = None,
        config: RagConfig | None = None,
    ):
        self.config = config or get_config()
        self._source = source if source is not None else get_collection_source(self.config)
        self._state = ServiceState.UNINITIALIZED
        self._snapshot = CollectionSnapshot()
        self._init_task: asyncio.Task | None = None
        self._error: RagInitializationError | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ServiceState.READY

    @property
    def snapshot(self) -> CollectionSnapshot:
        return self._snapshot

    @property
    def last_error(self) -> RagInitializationError | None:
        return self._error

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Load all collections once.

        Returns immediately when READY. While LOADING, joins the in-flight
        load instead of starting another. After FAILED, tries again.
        Cancelling one caller leaves the shared load running for the others.

        Raises:
            RagInitializationError: a required collection failed to load
        """
        if self._state is ServiceState.READY:
            return

        if self._init_task is None:
            self._state = ServiceState.LOADING
            self._init_task = asyncio.ensure_future(self._run_initialize())

        await asyncio.shield(self._init_task)

    async def _run_initialize(self) -> None:
        try:
            snapshot = await self._load_snapshot()
        except asyncio.CancelledError:
            self._state = ServiceState.UNINITIALIZED
            raise
        except RagInitializationError as e:
            self._state = ServiceState.FAILED
            self._error = e
            raise
        finally:
            self._init_task = None

        self._snapshot = snapshot
        self._error = None
        self._state = ServiceState.READY

    async def reload(self) -> CollectionSnapshot:
        """
        Re-fetch every collection and swap the snapshot atomically.

        On failure the previous snapshot stays in place and the error
        propagates.
        """
        if self._state is not ServiceState.READY:
            await self.initialize()
            return self._snapshot

        snapshot = await self._load_snapshot()
        self._snapshot = snapshot
        logger.info("Reloaded RAG collections")
        return snapshot

    async def _load_snapshot(self) -> CollectionSnapshot:
        tracer = get_tracer()
        started = time.perf_counter()
        source_name = getattr(self._source, "name", type(self._source).__name__)

        with tracer.start_span("rag.initialize", attributes={RAG_SOURCE: source_name}) as span:
            try:
                procedures_raw, standards_raw, exam_files = await asyncio.gather(
                    self._source.fetch_collection("procedures"),
                    self._source.fetch_collection("standards"),
                    self._probe_exam_years(),
                )
                procedures = _build_documents("procedures", procedures_raw, Procedure.from_dict)
                standards = _build_documents("standards", standards_raw, Standard.from_dict)
            except CollectionLoadError as e:
                span.set_attribute(RAG_ERROR_CATEGORY, e.category.value)
                span.set_status("error", str(e))
                logger.error("RAG initialization failed: %s", e)
                raise RagInitializationError(e.category, str(e)) from e
            except Exception as e:
                span.set_attribute(RAG_ERROR_CATEGORY, ErrorCategory.UNKNOWN.value)
                span.set_status("error", str(e))
                logger.error("RAG initialization failed: %s", e)
                raise RagInitializationError(ErrorCategory.UNKNOWN, str(e)) from e

            for key, value in collection_attributes(
                procedures=len(procedures),
                standards=len(standards),
                exam_years=len(exam_files),
            ).items():
                span.set_attribute(key, value)
            span.set_status("ok")

        logger.info(
            "RAG collections loaded in %.0fms: %d procedures, %d standards, exam years %s",
            (time.perf_counter() - started) * 1000,
            len(procedures),
            len(standards),
            [f.year for f in exam_files] or "none",
        )
        return CollectionSnapshot(
            procedures=procedures,
            standards=standards,
            exam_files=exam_files,
            loaded_at=datetime.now(timezone.utc),
        )

    async def _probe_exam_years(self) -> tuple[ExamFile, ...]:
        years = self.config.exam_years()
        results = await asyncio.gather(*(self._fetch_exam_year(year) for year in years))
        return tuple(result for result in results if result is not None)

    async def _fetch_exam_year(self, year: int) -> ExamFile | None:
        try:
            exams = await self._source.fetch_exam_year(year)
        except Exception as e:
            # One broken year never aborts the probe
            logger.warning("Skipping exam year %d: %s", year, e)
            return None

        if exams is None:
            logger.debug("No exam file for %d", year)
            return None

        exams = tuple(exam for exam in exams if isinstance(exam, dict))
        if not exams:
            return None
        return ExamFile(year=year, exams=exams)

    # ------------------------------------------------------------------
    # Searchers
    # ------------------------------------------------------------------

    def _ready_snapshot(self, operation: str) -> CollectionSnapshot | None:
        if self._state is not ServiceState.READY:
            logger.warning("RAG service not initialized (%s), returning no results", operation)
            return None
        return self._snapshot

    def _search_keywords(self, keywords: Sequence[str]) -> list[str]:
        if self.config.expand_synonyms:
            return expand_keywords(keywords)
        return list(keywords)

    def search_procedures(
        self,
        keywords: Sequence[str],
        limit: int = DEFAULT_PROCEDURE_LIMIT,
    ) -> list[Procedure]:
        snapshot = self._ready_snapshot("search_procedures")
        if snapshot is None:
            return []
        return search_procedures(snapshot.procedures, self._search_keywords(keywords), limit)

    def search_standards(
        self,
        keywords: Sequence[str] | None = None,
        query_text: str = "",
        limit: int = DEFAULT_STANDARD_LIMIT,
    ) -> list[Standard]:
        snapshot = self._ready_snapshot("search_standards")
        if snapshot is None:
            return []
        return search_standards(
            snapshot.standards,
            self._search_keywords(keywords or []),
            query_text=query_text,
            limit=limit,
            max_keywords=self.config.max_keywords,
        )

    def search_exam_questions(
        self,
        keywords: Sequence[str],
        limit: int = DEFAULT_EXAM_LIMIT,
    ) -> list[ExamSubQuestion]:
        snapshot = self._ready_snapshot("search_exam_questions")
        if snapshot is None:
            return []
        return search_exam_questions(snapshot.exam_files, self._search_keywords(keywords), limit)

    async def search_all(
        self,
        query_text: str,
        custom_keywords: Sequence[str] | None = None,
    ) -> SearchAllResult:
        """
        Extract keywords, search every collection and assemble the context.

        Args:
            query_text: Question or user message to search for
            custom_keywords: Extra keywords from the caller (e.g. a question's
                tagged keywords), merged with the extracted ones

        Returns:
            SearchAllResult with the context block, the three ranked lists
            and the keyword set that was used

        Raises:
            RagInitializationError: collections could not be loaded
        """
        await self.initialize()

        tracer = get_tracer()
        keywords = merge_keywords(
            extract_keywords(query_text, self.config.max_keywords),
            custom_keywords,
        )
        attributes: dict[str, Any] = {
            RAG_KEYWORDS: keywords,
            RAG_KEYWORD_COUNT: len(keywords),
        }
        if get_tracing_config().capture_query:
            attributes[RAG_QUERY] = query_text

        with tracer.start_span("rag.search_all", attributes=attributes) as span:
            snapshot = self._snapshot
            search_keywords = self._search_keywords(keywords)

            # Pure reads over an immutable snapshot
            procedures, standards, exam_questions = await asyncio.gather(
                asyncio.to_thread(search_procedures, snapshot.procedures, search_keywords),
                asyncio.to_thread(
                    search_standards,
                    snapshot.standards,
                    search_keywords,
                    query_text,
                    DEFAULT_STANDARD_LIMIT,
                    self.config.max_keywords,
                ),
                asyncio.to_thread(search_exam_questions, snapshot.exam_files, search_keywords),
            )

            context = format_as_context(
                procedures=procedures,
                standards=standards,
                exam_questions=exam_questions,
            )
            for key, value in search_result_attributes(
                procedures=len(procedures),
                standards=len(standards),
                exam_questions=len(exam_questions),
                context_length=len(context),
            ).items():
                span.set_attribute(key, value)

        logger.debug(
            "search_all: %d procedures, %d standards, %d exam questions for %s",
            len(procedures),
            len(standards),
            len(exam_questions),
            keywords,
        )
        return SearchAllResult(
            context=context,
            procedures=procedures,
            standards=standards,
            exam_questions=exam_questions,
            keywords=keywords,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_standard_by_id(self, standard_id: str) -> Standard | None:
        snapshot = self._ready_snapshot("get_standard_by_id")
        if snapshot is None:
            return None
        return next((doc for doc in snapshot.standards if doc.id == str(standard_id)), None)

    def get_standards_by_chapter(self, chapter: str | int) -> list[Standard]:
        snapshot = self._ready_snapshot("get_standards_by_chapter")
        if snapshot is None:
            return []
        return [doc for doc in snapshot.standards if doc.chapter == str(chapter)]

    def search_by_situation(
        self,
        situation: str,
        extra_keywords: Sequence[str] | None = None,
        limit: int = DEFAULT_SITUATION_LIMIT,
    ) -> list[Standard]:
        """
        Standards related to a KAM situation passage.

        Always expands with accounting synonyms, since situation passages
        rarely use the exact terms of the standards.
        """
        snapshot = self._ready_snapshot("search_by_situation")
        if snapshot is None:
            return []
        keywords = merge_keywords(
            extract_keywords(situation, self.config.max_keywords),
            extra_keywords,
        )
        return search_standards(snapshot.standards, expand_keywords(keywords), limit=limit)

    def get_stats(self) -> dict[str, Any]:
        snapshot = self._snapshot
        return {
            "state": self._state.value,
            "procedures": len(snapshot.procedures),
            "standards": len(snapshot.standards),
            "exam_years": snapshot.exam_years,
            "exam_questions": len(flatten_exams(snapshot.exam_files)),
            "loaded_at": snapshot.loaded_at.isoformat() if snapshot.loaded_at else None,
        }

    def close(self) -> None:
        """Release the collection source's resources, if it holds any."""
        close = getattr(self._source, "close", None)
        if close is not None:
            close()

    def get_loading_status(self) -> dict[str, Any]:
        return {
            "state": self._state.value,
            "ready": self.is_ready,
            "loading": self._state is ServiceState.LOADING,
            "error": str(self._error) if self._error else None,
            "error_category": self._error.category.value if self._error else None,
        }
