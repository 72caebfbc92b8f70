"""Shared test doubles for relay unit tests."""

__all__ = ["fakes"]
