"""Exception hierarchy for cluster operations."""


class ClusterOpsError(Exception):
    """Base class for every error raised by clusterops."""


class InputValidationError(ClusterOpsError):
    """A user-supplied value is invalid. Raised before any remote call."""


class PrerequisiteError(ClusterOpsError):
    """A required tool, credential or cluster connection is missing."""


class RemoteOperationError(ClusterOpsError):
    """A call against the EKS API or kubectl failed."""


class UpdateTimeoutError(RemoteOperationError):
    """A resource did not reach its terminal state within the poll budget."""


class ConfirmationDeclinedError(ClusterOpsError):
    """The operator declined the confirmation prompt."""


class ValidationFailedError(ClusterOpsError):
    """A validation run finished with status FAILED."""

    def __init__(self, message: str, results=None):
        super().__init__(message)
        self.results = results
