"""Shared fixtures: an in-memory FHIR server behind httpx.MockTransport."""

import json
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from patient_admin.clients.fhir import FHIRClient, FHIRConfig
from patient_admin.config import AppConfig
from patient_admin.main import create_app

FHIR_BASE_URL = "http://fhir.test/fhir"


class FakeFHIRServer:
    """Just enough of a FHIR server for the Patient endpoints."""

    def __init__(self):
        """Initialize with no patients."""
        self.patients: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.fail_with: int | None = None
        self._next_id = 1

    def add_patient(self, **resource: Any) -> dict[str, Any]:
        """Store a patient, assigning an id when none is given."""
        resource.setdefault("id", self._new_id())
        patient = {"resourceType": "Patient", **resource}
        self.patients[patient["id"]] = patient
        return patient

    def calls(self, method: str | None = None) -> list[httpx.Request]:
        """Requests received so far, optionally only those with ``method``."""
        return [request for request in self.requests if method is None or request.method == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"resourceType": "OperationOutcome"})

        path = request.url.path.removeprefix("/fhir")
        parts = [part for part in path.split("/") if part]

        if parts == ["Patient"] and request.method == "GET":
            return self._search(request)
        if parts == ["Patient"] and request.method == "POST":
            resource = json.loads(request.content)
            return httpx.Response(201, json=self.add_patient(**resource))
        if len(parts) == 2 and parts[0] == "Patient":
            return self._instance(request, parts[1])

        return httpx.Response(404, json={"resourceType": "OperationOutcome"})

    def _instance(self, request: httpx.Request, patient_id: str) -> httpx.Response:
        if request.method == "PUT":
            resource = json.loads(request.content)
            self.patients[patient_id] = {**resource, "id": patient_id}
            return httpx.Response(200, json=self.patients[patient_id])

        if patient_id not in self.patients:
            return httpx.Response(404, json={"resourceType": "OperationOutcome"})

        if request.method == "DELETE":
            del self.patients[patient_id]
            return httpx.Response(204)
        return httpx.Response(200, json=self.patients[patient_id])

    def _search(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        matches = list(self.patients.values())

        if "name" in params:
            needle = params["name"].lower()
            matches = [patient for patient in matches if needle in self._name_text(patient)]
        if "telecom" in params:
            system, _, value = params["telecom"].partition("|")
            matches = [
                patient
                for patient in matches
                if any(c.get("system") == system and c.get("value") == value for c in patient.get("telecom", []))
            ]

        skip = int(params.get("_skip", 0))
        count = int(params.get("_count", 10))
        page = matches[skip : skip + count]

        bundle = {
            "resourceType": "Bundle",
            "type": "searchset",
            "total": len(matches),
            "entry": [{"resource": patient} for patient in page],
        }
        return httpx.Response(200, json=bundle)

    def _name_text(self, patient: dict[str, Any]) -> str:
        words = []
        for name in patient.get("name", []):
            words.extend(name.get("given", []))
            words.append(name.get("family", ""))
            words.append(name.get("text", ""))
        return " ".join(word for word in words if word).lower()

    def _new_id(self) -> str:
        patient_id = f"pat-{self._next_id}"
        self._next_id += 1
        return patient_id


@pytest.fixture
def fhir_server():
    """Create an empty fake FHIR server."""
    return FakeFHIRServer()


@pytest.fixture
def fhir_client(fhir_server):
    """FHIR client wired to the fake server."""
    return FHIRClient(FHIRConfig(base_url=FHIR_BASE_URL), transport=httpx.MockTransport(fhir_server.handler))


@pytest.fixture
def app_config():
    """Configuration with a short debounce window to keep tests fast."""
    return AppConfig(fhir_base_url=FHIR_BASE_URL, search_debounce_ms=20)


@pytest.fixture
def client(fhir_server, app_config):
    """Test client for an application backed by the fake server."""
    app = create_app(app_config, transport=httpx.MockTransport(fhir_server.handler))
    with TestClient(app) as test_client:
        yield test_client
