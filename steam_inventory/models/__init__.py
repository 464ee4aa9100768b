"""Pydantic models for normalized inventory items."""
