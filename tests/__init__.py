"""
Tests Package - Unit Tests

Test structure:
- tests/unit/ - Fast, isolated unit tests (no network)
- tests/conftest.py - Shared fixtures: scripted RPC gateway, recording sleep
"""
