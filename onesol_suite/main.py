import asyncio
import sys
from typing import Optional, Sequence

from mcp.server.fastmcp.utilities.logging import configure_logging, get_logger

from onesol_suite.config import load_config
from onesol_suite.errors import ConfigError, EmptySuiteError
from onesol_suite.runner import Outcome, Step, run_suite
from onesol_suite.swap_test import build_suite

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

logger = get_logger(__name__)


def exit_status(outcome: Outcome) -> int:
    return EXIT_SUCCESS if outcome.succeeded else EXIT_FAILURE


def main(steps: Optional[Sequence[Step]] = None) -> int:
    """
    Runs the swap test suite and returns the process exit status.

    The steps are designed to run sequentially in the given order: each one
    relies on the chain state left by the ones before it.
    """
    try:
        config = load_config()
    except ConfigError as e:
        print(e, file=sys.stderr)
        return EXIT_FAILURE
    configure_logging(config.log_level)

    if steps is None:
        steps = build_suite()
    try:
        outcome = asyncio.run(run_suite(steps))
    except EmptySuiteError as e:
        logger.error(str(e))
        print(e, file=sys.stderr)
        return EXIT_FAILURE

    if not outcome.succeeded:
        print(f"{type(outcome.error).__name__}: {outcome.error}", file=sys.stderr)
    return exit_status(outcome)


if __name__ == "__main__":
    sys.exit(main())
