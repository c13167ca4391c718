"""Pydantic models shared across the client core and the API."""
