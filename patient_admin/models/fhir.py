"""FHIR R4 wire models for the Patient resource and search bundles."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FHIRModel(BaseModel):
    """Base for FHIR elements.

    Field names are snake_case in Python and camelCase on the wire. Elements
    this application does not model are kept as extra fields so that a
    full-resource PUT sends them back unchanged.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON shape the FHIR server expects."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class HumanName(FHIRModel):
    """A person's name."""

    given: list[str] | None = None
    family: str | None = None
    text: str | None = None


class ContactPoint(FHIRModel):
    """Phone, email or other contact detail."""

    system: str | None = None
    value: str | None = None


class Patient(FHIRModel):
    """Patient resource."""

    resource_type: Literal["Patient"] = "Patient"
    id: str | None = None
    name: list[HumanName] | None = None
    gender: str | None = None
    birth_date: str | None = None
    telecom: list[ContactPoint] | None = None
    active: bool | None = None

    @property
    def primary_name(self) -> HumanName | None:
        """First entry of the name list, if any."""
        return self.name[0] if self.name else None

    @property
    def phone(self) -> str | None:
        """Value of the first telecom entry tagged as a phone."""
        for contact in self.telecom or []:
            if contact.system == "phone":
                return contact.value
        return None


class BundleEntry(FHIRModel):
    """One entry of a search bundle."""

    resource: Patient | dict[str, Any] | None = None


class Bundle(FHIRModel):
    """Search result envelope."""

    resource_type: Literal["Bundle"] = "Bundle"
    total: int | None = None
    entry: list[BundleEntry] | None = None

    @property
    def patients(self) -> list[Patient]:
        """Resources of the entries that carry one."""
        return [entry.resource for entry in self.entry or [] if isinstance(entry.resource, Patient)]
