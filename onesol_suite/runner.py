from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from mcp.server.fastmcp.utilities.logging import get_logger

from onesol_suite.errors import EmptySuiteError, StepFailure, SuiteError

logger = get_logger(__name__)

# Console protocol. Scraped by external tooling, keep verbatim.
RUN_NOTICE = "Run test: {name}"
SUCCESS_NOTICE = "Success\n"

# --- Data Structures ---

class Step(BaseModel):
    """One named asynchronous unit of the suite. Identity is its position."""
    model_config = ConfigDict(frozen=True)

    name: str
    operation: Callable[[], Awaitable[None]]


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    FAILED = "failed"
    SUCCEEDED = "succeeded"


class Outcome(BaseModel):
    """Final result of a suite run: success, or the first failing step and its error."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    succeeded: bool
    completed: int = 0 # Number of steps that finished without error
    step_name: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, completed: int) -> "Outcome":
        return cls(succeeded=True, completed=completed)

    @classmethod
    def failure(cls, completed: int, step_name: str, error: BaseException) -> "Outcome":
        return cls(succeeded=False, completed=completed, step_name=step_name, error=error)

    def raise_for_failure(self) -> None:
        """Raises StepFailure wrapping the original error if the run failed."""
        if not self.succeeded:
            raise StepFailure(self.step_name, self.error)

# --- Suite Run ---

class SuiteRun:
    """
    A single, non-resumable execution of an ordered list of steps.

    State machine: IDLE -> RUNNING(i) -> RUNNING(i+1) | FAILED | SUCCEEDED.
    Steps are awaited one at a time in the order given; the first error stops
    the run. Ordering is the only dependency mechanism: a step may rely on
    the on-chain side effects of every step before it.
    """

    def __init__(self, steps: Sequence[Step]):
        if not steps:
            raise EmptySuiteError()
        self.steps: List[Step] = list(steps)
        self.index = 0
        self.state = RunState.IDLE

    @property
    def current(self) -> Optional[Step]:
        if self.state != RunState.RUNNING:
            return None
        return self.steps[self.index]

    async def execute(self) -> Outcome:
        if self.state != RunState.IDLE:
            raise SuiteError(f"Suite run already {self.state.value}; start a new run instead.")

        self.state = RunState.RUNNING
        logger.debug(f"Starting suite run with {len(self.steps)} steps")
        while self.index < len(self.steps):
            step = self.steps[self.index]
            print(RUN_NOTICE.format(name=step.name))
            try:
                await step.operation()
            except Exception as e:
                self.state = RunState.FAILED
                logger.error(f"Step '{step.name}' ({self.index + 1}/{len(self.steps)}) failed: {e!r}")
                return Outcome.failure(self.index, step.name, e)
            logger.debug(f"Step '{step.name}' completed")
            self.index += 1

        self.state = RunState.SUCCEEDED
        print(SUCCESS_NOTICE)
        logger.info(f"All {len(self.steps)} steps completed")
        return Outcome.success(self.index)


async def run_suite(steps: Sequence[Step]) -> Outcome:
    """Runs ``steps`` in order from the first one. Raises EmptySuiteError for an empty list."""
    return await SuiteRun(steps).execute()
