"""Exceptions raised by the suite runner and its swap test steps."""


class SuiteError(Exception):
    """Base class for errors raised by onesol_suite."""

    pass


class StepFailure(SuiteError):
    """Raised when a step operation fails.

    Wraps the underlying error without modification; it is available both as
    ``cause`` and as ``__cause__``.
    """

    def __init__(self, step_name: str, cause: BaseException):
        self.step_name = step_name
        self.cause = cause
        super().__init__(f"Step '{step_name}' failed: {cause}")
        self.__cause__ = cause


class EmptySuiteError(SuiteError, ValueError):
    """Raised when a suite is run without any steps."""

    def __init__(self):
        super().__init__("A suite run needs at least one step.")


class ConfigError(SuiteError, ValueError):
    """Raised when the environment configuration is missing or malformed."""

    pass


class ClusterError(SuiteError):
    """Raised when the cluster cannot be reached or does not answer in time."""

    pass


class TransactionFailed(ClusterError):
    """Raised when the cluster rejects or fails a submitted transaction."""

    def __init__(self, signature: str, err: object):
        self.signature = signature
        self.err = err
        super().__init__(f"Transaction {signature} failed: {err}")


class PreconditionError(SuiteError):
    """Raised when the on-chain state a step expects is missing.

    This typically happens when steps are run out of order, or when a
    program has not been deployed to the target cluster.
    """

    pass
