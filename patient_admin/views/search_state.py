"""Search/pagination state of the patient list and its URL binding."""

from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field

from patient_admin.services.patients_service import PatientSearchParams

SearchBy = Literal["name", "phone"]

SEARCH_BY_OPTIONS: list[tuple[SearchBy, str]] = [("name", "Name"), ("phone", "Phone")]


class SearchQueryState(BaseModel):
    """What the list view shows: search field, search text and zero-based page."""

    search_by: SearchBy = "name"
    search: str = ""
    page: int = Field(0, ge=0)

    @classmethod
    def from_query_params(cls, params: Mapping[str, str]) -> "SearchQueryState":
        """Parse URL parameters, falling back to defaults for missing or malformed values."""
        search_by = params.get("searchBy")
        if search_by not in ("name", "phone"):
            search_by = "name"

        try:
            page = max(int(params.get("page", "0")), 0)
        except ValueError:
            page = 0

        return cls(search_by=search_by, search=params.get("search", "").strip(), page=page)

    @staticmethod
    def is_canonical(params: Mapping[str, str]) -> bool:
        """Whether the URL already carries the page and search field."""
        return "page" in params and "searchBy" in params

    def to_query_params(self) -> dict[str, str]:
        """Inverse of ``from_query_params``. Empty search text is left out."""
        params = {"page": str(self.page), "searchBy": self.search_by}
        if self.search:
            params["search"] = self.search
        return params

    def with_page(self, page: int) -> "SearchQueryState":
        return self.model_copy(update={"page": page})

    def list_params(self, page_size: int) -> PatientSearchParams:
        """Remote search parameters for this state."""
        params: PatientSearchParams = {"_skip": self.page * page_size, "_count": page_size}
        if self.search and self.search_by == "name":
            params["name"] = self.search
        if self.search and self.search_by == "phone":
            params["telecom"] = f"phone|{self.search}"
        return params
