"""Test suite for FormShape.

This package contains tests for:
- Schema model (parsing, serialization, immutability)
- Validation engine (types, constraints, paths, messages)
- Builders, JSON text interface, events and the form runtime
"""
