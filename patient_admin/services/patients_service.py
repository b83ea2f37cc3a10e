"""Remote operations on the FHIR Patient collection."""

from typing import Any, TypedDict

from patient_admin.clients.fhir import FHIRClient
from patient_admin.models.fhir import Bundle, Patient


class PatientSearchParams(TypedDict, total=False):
    """Query parameters accepted by the Patient search."""

    name: str
    telecom: str
    _skip: int
    _count: int


class PatientsService:
    """One operation per CRUD verb against ``/Patient``.

    Filtering and pagination are delegated to the server; errors from the
    client propagate unchanged.
    """

    resource_path = "/Patient"

    def __init__(self, client: FHIRClient):
        """Initialize with the FHIR client used for every call."""
        self.client = client

    async def list_patients(self, params: PatientSearchParams | None = None) -> Bundle:
        """Search patients and return the server's paginated bundle."""
        query = {key: value for key, value in (params or {}).items() if value is not None}
        data = await self.client.get(self.resource_path, params=query)
        return Bundle.model_validate(data)

    async def get_patient_by_id(self, patient_id: str) -> Patient:
        data = await self.client.get(f"{self.resource_path}/{patient_id}")
        return Patient.model_validate(data)

    async def create_patient(self, resource: dict[str, Any]) -> Patient | None:
        """Create a patient; the server assigns its id."""
        data = await self.client.post(self.resource_path, resource)
        return Patient.model_validate(data) if data else None

    async def update_patient(self, patient_id: str, resource: dict[str, Any]) -> Patient | None:
        """Replace the whole resource. Fields missing from ``resource`` are dropped server-side."""
        data = await self.client.put(f"{self.resource_path}/{patient_id}", resource)
        return Patient.model_validate(data) if data else None

    async def delete_patient(self, patient_id: str) -> None:
        await self.client.delete(f"{self.resource_path}/{patient_id}")
