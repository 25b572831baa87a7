"""Citro HTTP API (FastAPI)."""
