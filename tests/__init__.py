"""
Test Package for OneSol Suite

This package contains the test suite for the OneSol integration suite runner.
It covers the sequential runner contract, the process entry point, the
configuration layer, the RPC helpers, the instruction builders and the swap
test steps themselves.

Test Structure:
- integration/: Tests for every module, with Solana RPC calls mocked
- integration/conftest.py: Pytest fixtures and configuration for testing
"""

# Test package for onesol-suite
