"""
Integration Tests - End-to-End Caching Tests.

These tests wrap the InMemoryRepository with CachedRepository and
exercise reads, criteria, request context and invalidation together.

Test Files:
    - test_cached_repository_flow.py: Full caching workflow
"""
