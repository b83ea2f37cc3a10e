"""Browser session state and user feedback models."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel

from patient_admin.services.query_cache import QueryCache
from patient_admin.utils.debounce import Debouncer
from patient_admin.utils.logging import get_logger

logger = get_logger(__name__)


class Toast(BaseModel):
    """A notification shown once on the next rendered page."""

    description: str
    title: str | None = None
    variant: Literal["default", "destructive"] = "default"


SUCCESS_CREATED = "Patient created successfully."
SUCCESS_UPDATED = "Patient updated successfully."
SUCCESS_DELETED = "Patient deleted successfully."

REQUEST_FAILED = Toast(
    title="Uh oh! Something went wrong.",
    description="There was a problem with your request.",
    variant="destructive",
)


@dataclass
class BrowserSession:
    """Per-browser state: query cache, pending toasts and the search debouncer."""

    session_id: str
    query_cache: QueryCache = field(default_factory=QueryCache)
    search_debouncer: Debouncer = field(default_factory=lambda: Debouncer(delay=0.3))
    toasts: list[Toast] = field(default_factory=list)
    last_activity: datetime = field(default_factory=lambda: datetime.now(UTC))

    def update_activity(self) -> None:
        """Update the last activity timestamp."""
        self.last_activity = datetime.now(UTC)

    def push_toast(self, toast: Toast) -> None:
        """Queue a toast for the next rendered page."""
        logger.debug(f"Queueing {toast.variant} toast for session {self.session_id}: {toast.description}")
        self.toasts.append(toast)

    def pop_toasts(self) -> list[Toast]:
        """Return and clear the pending toasts."""
        toasts, self.toasts = self.toasts, []
        return toasts
