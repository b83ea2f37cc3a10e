"""Tests for the FHIR client and the patients service."""

import json

import httpx
import pytest

from patient_admin.clients.fhir import FHIRClient, FHIRConfig
from patient_admin.models.fhir import Bundle, Patient
from patient_admin.services.patients_service import PatientsService


@pytest.fixture
def service(fhir_client):
    """Patients service over the fake FHIR server."""
    return PatientsService(fhir_client)


class TestFHIRClient:
    """Tests for request construction."""

    @pytest.mark.asyncio
    async def test_fixed_headers_on_every_request(self, fhir_client, fhir_server):
        """Test that content type and pagination preference are always sent."""
        await fhir_client.get("/Patient")
        await fhir_client.post("/Patient", {"resourceType": "Patient"})

        for request in fhir_server.requests:
            assert request.headers["Content-Type"] == "application/fhir+json"
            assert request.headers["Prefer"] == "pagination=offset-skip"

    @pytest.mark.asyncio
    async def test_paths_are_relative_to_base_url(self, fhir_client, fhir_server):
        """Test that resource paths are appended to the base URL."""
        await fhir_client.get("/Patient", params={"name": "Jane"})

        assert str(fhir_server.requests[0].url) == "http://fhir.test/fhir/Patient?name=Jane"

    @pytest.mark.asyncio
    async def test_error_status_raises(self, fhir_client, fhir_server):
        """Test that non-2xx responses raise without retrying."""
        fhir_server.fail_with = 500

        with pytest.raises(httpx.HTTPStatusError):
            await fhir_client.get("/Patient")
        assert len(fhir_server.requests) == 1

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self, fhir_client, fhir_server):
        """Test that a 204 response decodes to None."""
        fhir_server.add_patient(id="p1")
        assert await fhir_client.delete("/Patient/p1") is None

    @pytest.mark.asyncio
    async def test_network_error_raises(self):
        """Test that connection failures surface as httpx errors."""

        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = FHIRClient(FHIRConfig(base_url="http://fhir.test/fhir"), transport=httpx.MockTransport(refuse))
        with pytest.raises(httpx.ConnectError):
            await client.get("/Patient")
        await client.aclose()


class TestPatientsService:
    """Tests for the CRUD operations against /Patient."""

    @pytest.mark.asyncio
    async def test_list_patients_passes_params(self, service, fhir_server):
        """Test that search parameters are sent as given and None values are dropped."""
        fhir_server.add_patient(name=[{"given": ["Jane"], "family": "Doe"}])

        bundle = await service.list_patients({"name": "Jane", "_skip": 0, "_count": 10, "telecom": None})

        assert isinstance(bundle, Bundle)
        assert bundle.total == 1
        params = fhir_server.requests[0].url.params
        assert dict(params) == {"name": "Jane", "_skip": "0", "_count": "10"}

    @pytest.mark.asyncio
    async def test_list_patients_by_phone(self, service, fhir_server):
        """Test that a telecom token filters by phone."""
        fhir_server.add_patient(id="a", telecom=[{"system": "phone", "value": "5551234567"}])
        fhir_server.add_patient(id="b", telecom=[{"system": "phone", "value": "5550000000"}])

        bundle = await service.list_patients({"telecom": "phone|5551234567"})

        assert [patient.id for patient in bundle.patients] == ["a"]

    @pytest.mark.asyncio
    async def test_get_patient_by_id(self, service, fhir_server):
        """Test loading one patient."""
        fhir_server.add_patient(id="p1", gender="female")

        patient = await service.get_patient_by_id("p1")

        assert isinstance(patient, Patient)
        assert patient.gender == "female"
        assert fhir_server.requests[0].url.path == "/fhir/Patient/p1"

    @pytest.mark.asyncio
    async def test_get_missing_patient_raises(self, service):
        """Test that a 404 propagates as an HTTP error."""
        with pytest.raises(httpx.HTTPStatusError):
            await service.get_patient_by_id("missing")

    @pytest.mark.asyncio
    async def test_create_patient_posts_resource(self, service, fhir_server):
        """Test that creation posts the resource to the collection."""
        created = await service.create_patient({"resourceType": "Patient", "gender": "male"})

        request = fhir_server.calls("POST")[0]
        assert request.url.path == "/fhir/Patient"
        assert json.loads(request.content) == {"resourceType": "Patient", "gender": "male"}
        assert created.id == "pat-1"

    @pytest.mark.asyncio
    async def test_update_patient_puts_full_resource(self, service, fhir_server):
        """Test that updates replace the resource at its id."""
        fhir_server.add_patient(id="p1", gender="male", active=False)

        await service.update_patient("p1", {"resourceType": "Patient", "id": "p1", "gender": "female"})

        request = fhir_server.calls("PUT")[0]
        assert request.url.path == "/fhir/Patient/p1"
        assert fhir_server.patients["p1"] == {"resourceType": "Patient", "id": "p1", "gender": "female"}

    @pytest.mark.asyncio
    async def test_delete_patient(self, service, fhir_server):
        """Test that deletion removes the patient."""
        fhir_server.add_patient(id="p1")

        assert await service.delete_patient("p1") is None
        assert "p1" not in fhir_server.patients
