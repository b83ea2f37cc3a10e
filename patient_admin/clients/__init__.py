"""Clients for remote services."""
