"""Citro - voice assistant backend for the college fest event platform."""
