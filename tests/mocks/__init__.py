"""Mocks for nativedep tests."""
