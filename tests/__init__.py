"""
Test suite for the ephemeral file host.

Run all tests: pytest
Run with coverage: pytest --cov=. --cov-report=html
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_sweep_service.py -v
"""
