"""Domain errors raised by services and adapters."""


class InvalidInputError(ValueError):
    """Input rejected before any computation or write."""


class RemoteUnavailableError(RuntimeError):
    """The remote store could not be reached or rejected the request."""


class SaveFailedError(RuntimeError):
    """Both the remote store and the local fallback failed to persist a goal."""


class GoalNotFoundError(LookupError):
    """No goal with the requested id exists for the user."""


class AnalysisFailedError(RuntimeError):
    """The meal analysis webhook failed or returned an invalid payload."""


class AnalysisPendingError(AnalysisFailedError):
    """The analysis workflow accepted the image but has not finished yet."""
