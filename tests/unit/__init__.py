"""
Unit Tests - Testing Individual Components in Isolation.

Each component is tested in isolation with mocked dependencies.
Unit tests should be fast, deterministic, and focused.

Test Files:
    - test_key_deriver.py: Cache key derivation and criteria fallback
    - test_decision_gate.py: Only/except lists, skip flags, minutes
    - test_cached_repository.py: Caching wrapper behaviour
    - test_config_loader.py: Configuration loading/validation
"""
