"""Patient Admin: a web UI for managing FHIR Patient resources."""

__version__ = "0.1.0"
