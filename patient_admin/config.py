"""Application configuration."""

import os
from dataclasses import dataclass


@dataclass
class AppConfig:
    """Configuration for the patient admin application."""

    fhir_base_url: str = "https://demo.kodjin.com/fhir"
    page_size: int = 10
    search_debounce_ms: int = 300
    query_stale_seconds: float = 30.0
    session_timeout_minutes: int = 60
    log_level: str = "INFO"

    @property
    def search_debounce_seconds(self) -> float:
        """Debounce window for live search, in seconds."""
        return self.search_debounce_ms / 1000

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build configuration from environment variables, falling back to defaults."""
        defaults = cls()
        return cls(
            fhir_base_url=os.getenv("FHIR_BASE_URL", defaults.fhir_base_url),
            page_size=int(os.getenv("PAGE_SIZE", str(defaults.page_size))),
            search_debounce_ms=int(os.getenv("SEARCH_DEBOUNCE_MS", str(defaults.search_debounce_ms))),
            query_stale_seconds=float(os.getenv("QUERY_STALE_SECONDS", str(defaults.query_stale_seconds))),
            session_timeout_minutes=int(os.getenv("SESSION_TIMEOUT_MINUTES", str(defaults.session_timeout_minutes))),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level),
        )
