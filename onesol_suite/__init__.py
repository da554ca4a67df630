"""
OneSol Suite Package

This package runs the integration test suite of the 1sol swap aggregator
against a Solana cluster. The suite is a fixed, ordered list of steps:
preparing an spl-token-swap pool, initializing an aggregator protocol
account, then swapping through both. Each step relies on the on-chain state
the previous one produced, so the steps run one at a time and the first
failure ends the run.

Main components:
- runner.py: Sequential suite runner and the Step / Outcome models
- swap_test.py: The three swap test steps and the state they share
- instructions.py: Instruction builders for the aggregator and token-swap programs
- cluster.py: Solana RPC helpers (health, funding, send and confirm)
- config.py: Environment (.env) configuration
- main.py: Process entry point mapping the outcome to an exit status
"""

# OneSol Suite
