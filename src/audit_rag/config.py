"""
RAG configuration.

Loads collection locations and search settings from environment variables.
The CLI loads a .env file first (python-dotenv); library callers can also
build a RagConfig directly and pass it to RagService.
"""

import os
from dataclasses import dataclass
from datetime import date

DEFAULT_PROCEDURES_PATH = "js/data/KAM.json"
DEFAULT_STANDARDS_PATH = "questions.json"
DEFAULT_EXAM_PATH_TEMPLATE = "js/features/exam/data/{year}_hierarchical.json"
DEFAULT_EXAM_MIN_YEAR = 2014


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


def _env_int(name: str) -> int | None:
    value = os.environ.get(name)
    return int(value) if value else None


@dataclass
class RagConfig:
    """Configuration for collection loading and search.

    Environment Variables:
        RAG_BASE_URL: Serve collections over HTTP from this base URL
        RAG_DATA_DIR: Read collections from this directory (ignored if RAG_BASE_URL is set)
        RAG_PROCEDURES_PATH: KAM case file, relative (default: js/data/KAM.json)
        RAG_STANDARDS_PATH: Audit standard Q&A file, relative (default: questions.json)
        RAG_EXAM_PATH_TEMPLATE: Exam file pattern with {year}
        RAG_EXAM_MIN_YEAR: Oldest exam year probed (default: 2014)
        RAG_EXAM_MAX_YEAR: Newest exam year probed (default: current year)
        RAG_REQUEST_TIMEOUT: HTTP timeout in seconds (default: 10)
        RAG_MAX_KEYWORDS: Keywords extracted per query (default: 5)
        RAG_EXPAND_SYNONYMS: Expand keywords with accounting synonyms (default: false)
        RAG_LOG_LEVEL: Log level for the CLI (default: WARNING)

    With neither RAG_BASE_URL nor RAG_DATA_DIR set, the bundled sample
    collections are used.
    """

    base_url: str | None = None
    data_dir: str | None = None
    procedures_path: str = DEFAULT_PROCEDURES_PATH
    standards_path: str = DEFAULT_STANDARDS_PATH
    exam_path_template: str = DEFAULT_EXAM_PATH_TEMPLATE
    exam_min_year: int = DEFAULT_EXAM_MIN_YEAR
    exam_max_year: int | None = None
    request_timeout: float = 10.0
    max_keywords: int = 5
    expand_synonyms: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "RagConfig":
        """Load config from environment variables."""
        return cls(
            base_url=os.environ.get("RAG_BASE_URL") or None,
            data_dir=os.environ.get("RAG_DATA_DIR") or None,
            procedures_path=os.environ.get("RAG_PROCEDURES_PATH", DEFAULT_PROCEDURES_PATH),
            standards_path=os.environ.get("RAG_STANDARDS_PATH", DEFAULT_STANDARDS_PATH),
            exam_path_template=os.environ.get("RAG_EXAM_PATH_TEMPLATE", DEFAULT_EXAM_PATH_TEMPLATE),
            exam_min_year=_env_int("RAG_EXAM_MIN_YEAR") or DEFAULT_EXAM_MIN_YEAR,
            exam_max_year=_env_int("RAG_EXAM_MAX_YEAR"),
            request_timeout=float(os.environ.get("RAG_REQUEST_TIMEOUT", "10")),
            max_keywords=int(os.environ.get("RAG_MAX_KEYWORDS", "5")),
            expand_synonyms=_env_bool("RAG_EXPAND_SYNONYMS"),
            log_level=os.environ.get("RAG_LOG_LEVEL", "WARNING").upper(),
        )

    def exam_years(self) -> list[int]:
        """Years to probe, newest first."""
        newest = self.exam_max_year or date.today().year
        return list(range(newest, self.exam_min_year - 1, -1))

    def collection_paths(self) -> dict[str, str]:
        return {
            "procedures": self.procedures_path,
            "standards": self.standards_path,
        }


# Global config singleton
_config: RagConfig | None = None


def get_config() -> RagConfig:
    """Get the global RAG config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = RagConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None
