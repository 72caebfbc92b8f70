"""Test suite for the streaming relay.

Unit tests live under ``unit/`` grouped by domain and are collected without
the ``test_`` filename prefix (see conftest.py). Shared test doubles live in
the ``helpers/`` subpackage.
"""
