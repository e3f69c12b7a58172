"""Error taxonomy for split runs."""


class SplitError(Exception):
    """Base class for errors raised while requesting or running a split."""


class InvalidInput(SplitError, ValueError):
    """Bad configuration: missing source, bad duration or slice length."""


class NoSourceLoaded(InvalidInput):
    def __init__(self) -> None:
        super().__init__("No source video loaded")


class InvalidSliceLength(InvalidInput):
    def __init__(self, value: object) -> None:
        super().__init__(f"Slice length must be a positive integer, got {value!r}")
        self.value = value


class NotReady(SplitError):
    """The media engine has not finished its one-time load."""


class EngineNotReady(NotReady):
    def __init__(self) -> None:
        super().__init__("Media engine is not loaded yet")


class Conflict(SplitError):
    """Another run is already active against the shared engine."""


class RunInProgress(Conflict):
    def __init__(self, status: str) -> None:
        super().__init__(f"A split is already {status.lower()}")
        self.status = status


class ExecutionFailure(SplitError):
    """The engine failed while a run was executing."""


class StagingFailed(ExecutionFailure):
    def __init__(self, cause: str) -> None:
        super().__init__(f"Could not stage source: {cause}")
        self.cause = cause


class SegmentExecutionFailed(ExecutionFailure):
    def __init__(self, index: int, cause: str) -> None:
        super().__init__(f"Segment {index + 1} failed: {cause}")
        self.index = index
        self.cause = cause


class RunNotPrepared(Conflict):
    def __init__(self, status: str) -> None:
        super().__init__(f"Split must be prepared before it is executed (status is {status.lower()})")
        self.status = status
