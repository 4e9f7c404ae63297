"""
Schema Catalog Test Suite.

This package contains:
- unit/: Unit tests (pure, no external dependencies)
"""
