"""
Test Fixtures - Shared Test Data and Configurations.

This package contains reusable test fixtures:
    - sample_config.yaml: Sample cache configuration for testing

Usage:
    Import fixtures in test files via pytest fixtures or direct import.
"""
