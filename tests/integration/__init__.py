"""
Integration Tests for OneSol Suite

These tests run the suite runner and the swap test steps end to end in
process. The Solana cluster is never contacted: AsyncClient, AsyncToken and
the validator health endpoint are mocked, and every test starts from a clean
environment and fresh step state.

Test files:
- conftest.py: Pytest fixtures (clean environment, step recorder, mocked chain)
- test_runner.py: Ordering, stop-on-failure and outcome of the runner
- test_main.py: Exit status and console output of the entry point
- test_config.py: Environment and keypair loading
- test_cluster.py: Health, connection, send/confirm and funding helpers
- test_instructions.py: Aggregator and token-swap instruction layouts
- test_swap_test.py: The prepareTokenSwap, createOneSolProtocol and swap steps
"""

# Integration tests for onesol-suite
