"""Shared test helpers for the roomdispatch test suite."""
