"""Display values for the rows of the patient table."""

from dataclasses import dataclass

from patient_admin.models.fhir import HumanName, Patient

PLACEHOLDER = "-"


def display_name(name: HumanName | None) -> str:
    """Render "given family", either part alone, the free-text name, or a dash."""
    if name is None:
        return PLACEHOLDER

    given = name.given[0] if name.given else None
    family = name.family

    if given and family:
        return f"{given} {family}"
    if given or family:
        return given or family
    if name.text:
        return name.text
    return PLACEHOLDER


@dataclass
class PatientRow:
    """One table row."""

    index: int
    id: str | None
    name: str
    gender: str
    birth_date: str
    phone: str
    active: bool

    @property
    def status(self) -> str:
        return "Active" if self.active else "Inactive"

    @classmethod
    def from_patient(cls, patient: Patient, index: int) -> "PatientRow":
        """Build the row for ``patient``; ``index`` is its one-based position on the page."""
        return cls(
            index=index,
            id=patient.id,
            name=display_name(patient.primary_name),
            gender=patient.gender or PLACEHOLDER,
            birth_date=patient.birth_date or PLACEHOLDER,
            phone=patient.phone or PLACEHOLDER,
            active=bool(patient.active),
        )


def build_rows(patients: list[Patient]) -> list[PatientRow]:
    return [PatientRow.from_patient(patient, index) for index, patient in enumerate(patients, start=1)]
