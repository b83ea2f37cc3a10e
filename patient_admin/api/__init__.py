"""Routes and request dependencies."""
