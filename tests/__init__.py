"""Citro Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - voice/: normalizer, classifier, slot extractor, router, composer, pipeline
  - security/: role capabilities
  - services/: SQLite collaborators
- integration/: HTTP tests for the voice API

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/voice/
"""
