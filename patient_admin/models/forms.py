"""Create/update patient form schema and its mapping to the FHIR resource."""

import re
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from patient_admin.models.fhir import ContactPoint, HumanName, Patient


# Resource elements written from the form fields
FORM_OWNED_ELEMENTS = ("name", "gender", "birthDate", "telecom")


class Gender(StrEnum):
    """Administrative gender values accepted by the form."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class PatientFormValues(BaseModel):
    """Values submitted by the patient form.

    Aliases match the HTML input names.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str | None = Field(None, alias="lastName")
    gender: Gender
    date_of_birth: str = Field(..., alias="dateOfBirth")
    phone: str | None = None

    @field_validator("last_name", "phone", mode="before")
    @classmethod
    def blank_as_missing(cls, v: Any) -> Any:
        """Browsers submit empty strings for untouched optional inputs."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: str) -> str:
        """Require a YYYY-MM-DD date that is not in the future."""
        try:
            birth_date = datetime.strptime(v, "%Y-%m-%d").date()
        except ValueError as e:
            raise ValueError("Date must be in YYYY-MM-DD format (e.g., 1990-01-01)") from e

        if birth_date > date.today():
            raise ValueError("Date of birth cannot be in the future")

        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        if v is not None and not re.fullmatch(r"[0-9]{10}", v):
            raise ValueError("Phone number must be 10 digits")
        return v


def initial_form_values(patient: Patient) -> dict[str, str]:
    """Raw form field values pre-populated from an existing patient."""
    name = patient.primary_name
    values = {
        "firstName": name.given[0] if name and name.given else None,
        "lastName": name.family if name else None,
        "gender": patient.gender,
        "dateOfBirth": patient.birth_date,
        "phone": patient.phone,
    }
    return {key: value for key, value in values.items() if value is not None}


def form_errors(error: ValidationError) -> dict[str, str]:
    """Map a validation error to one message per form field (first error wins)."""
    errors: dict[str, str] = {}
    for item in error.errors():
        field = str(item["loc"][0]) if item["loc"] else "__root__"
        if field in errors:
            continue
        if item["type"] in ("missing", "string_too_short"):
            errors[field] = "This field is required"
        elif item["type"] == "enum":
            errors[field] = "Select a valid option"
        else:
            errors[field] = item["msg"].removeprefix("Value error, ")
    return errors


def build_patient_payload(values: PatientFormValues, existing: Patient | None = None) -> dict[str, Any]:
    """Build the wire resource for the submitted form values.

    The active flag is carried over from the existing resource when editing
    and defaults to true on creation.
    """
    patient = Patient(
        name=[HumanName(given=[values.first_name], family=values.last_name)],
        gender=values.gender.value,
        birth_date=values.date_of_birth,
        telecom=[ContactPoint(system="phone", value=values.phone)] if values.phone else None,
        active=existing.active if existing else True,
    )
    return patient.to_wire()


def merge_patient_payload(existing: Patient, payload: dict[str, Any]) -> dict[str, Any]:
    """Shallow-merge freshly built fields over the existing resource. New fields win.

    Elements the form edits are taken only from ``payload``, so a cleared
    optional field (e.g. the phone) is removed from the resource.
    """
    merged = {key: value for key, value in existing.to_wire().items() if key not in FORM_OWNED_ELEMENTS}
    return {**merged, **payload}
