"""Cached queries and mutations over the patients service.

Reads go through the browser session's query cache. Writes invalidate every
cached patient query and report a fixed message. Any failure is logged and
reported with one generic message; callers only see whether it worked.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from patient_admin.models.fhir import Bundle, Patient
from patient_admin.models.session import (
    REQUEST_FAILED,
    SUCCESS_CREATED,
    SUCCESS_DELETED,
    SUCCESS_UPDATED,
    Toast,
)
from patient_admin.services.patients_service import PatientSearchParams, PatientsService
from patient_admin.services.query_cache import QueryCache, QueryKey, make_query_key
from patient_admin.utils.logging import get_logger

logger = get_logger(__name__)

# ValueError covers undecodable bodies and pydantic validation of the response
REQUEST_ERRORS = (httpx.HTTPError, ValueError)

PATIENTS_KEY: QueryKey = ("patients",)


@dataclass
class QueryResult[T]:
    """Outcome of a cached read."""

    data: T | None = None
    error: Exception | None = None
    enabled: bool = True

    @property
    def is_error(self) -> bool:
        return self.error is not None


@dataclass
class MutationResult[T]:
    """Outcome of a write."""

    ok: bool
    data: T | None = None
    error: Exception | None = None


class PatientsDataAccess:
    """Data-access layer used by the pages."""

    def __init__(self, service: PatientsService, cache: QueryCache, notify: Callable[[Toast], None]):
        """Initialize data access.

        Args:
            service: Remote patients operations
            cache: Query cache of the current browser session
            notify: Receives the toast reporting each write or failure
        """
        self.service = service
        self.cache = cache
        self.notify = notify

    async def get_all_patients(self, params: PatientSearchParams | None = None) -> QueryResult[Bundle]:
        """Search patients; each distinct parameter set is cached separately."""
        params = params or {}
        key = make_query_key(*PATIENTS_KEY, "list", params=params)
        return await self._query(key, lambda: self.service.list_patients(params))

    async def get_patient_by_id(self, patient_id: str | None) -> QueryResult[Patient]:
        """Load one patient. Disabled (no request) when no id is given."""
        if not patient_id:
            return QueryResult(enabled=False)
        key = make_query_key(*PATIENTS_KEY, "detail", patient_id)
        return await self._query(key, lambda: self.service.get_patient_by_id(patient_id))

    async def create_patient(self, resource: dict[str, Any]) -> MutationResult[Patient]:
        return await self._mutate(lambda: self.service.create_patient(resource), SUCCESS_CREATED)

    async def update_patient(self, patient_id: str, resource: dict[str, Any]) -> MutationResult[Patient]:
        return await self._mutate(lambda: self.service.update_patient(patient_id, resource), SUCCESS_UPDATED)

    async def delete_patient(self, patient_id: str) -> MutationResult[None]:
        return await self._mutate(lambda: self.service.delete_patient(patient_id), SUCCESS_DELETED)

    async def _query[T](self, key: QueryKey, query_fn: Callable[[], Awaitable[T]]) -> QueryResult[T]:
        try:
            data = await self.cache.fetch(key, query_fn)
        except REQUEST_ERRORS as e:
            logger.error(f"Query {key} failed: {e}", exc_info=True)
            self.notify(REQUEST_FAILED)
            return QueryResult(error=e)
        return QueryResult(data=data)

    async def _mutate[T](
        self,
        mutation_fn: Callable[[], Awaitable[T]],
        success_message: str,
        invalidate: QueryKey = PATIENTS_KEY,
    ) -> MutationResult[T]:
        try:
            data = await mutation_fn()
        except REQUEST_ERRORS as e:
            logger.error(f"Mutation failed: {e}", exc_info=True)
            self.notify(REQUEST_FAILED)
            return MutationResult(ok=False, error=e)

        self.cache.invalidate(invalidate)
        logger.info(success_message)
        self.notify(Toast(description=success_message))
        return MutationResult(ok=True, data=data)
