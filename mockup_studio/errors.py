"""Error taxonomy shared by the pixel transforms and the pipeline."""


class MockupStudioError(Exception):
    """Base class for every error raised by the package."""


class DecodeError(MockupStudioError, ValueError):
    """Input cannot be interpreted as a pixel buffer."""


class ContextError(MockupStudioError, RuntimeError):
    """A rendering/compute surface could not be allocated."""


class ValidationError(MockupStudioError, ValueError):
    """A stage was invoked without its required inputs, or a remote
    response did not match its schema."""


class RemoteError(MockupStudioError):
    """A generation call failed (network, quota, content policy)."""


class StateTransitionError(MockupStudioError):
    """An illegal status transition was requested."""


class PartialFailure(MockupStudioError):
    """Some, but not all, mockup items succeeded.

    Recorded on the mockups stage rather than raised.
    """

    def __init__(self, failed: list, total: int) -> None:
        self.failed = list(failed)
        self.total = total
        super().__init__(f"{len(self.failed)} of {total} mockups failed: {', '.join(self.failed)}")
