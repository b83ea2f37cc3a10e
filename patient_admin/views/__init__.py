"""Presentation logic for the patient pages."""
