"""Pydantic schemas for entities and request payloads."""
