"""
Test suite for Expression Clustering.

This package contains all tests organized by component:
- test_algorithms/: Tests for the clustering engines and their helpers
- test_config.py: Tests for environment-backed configuration
"""
