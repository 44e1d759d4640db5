"""
core/exceptions.py
------------------
Domain exceptions raised by the service layer.

Services never build HTTP responses; each exception carries the status code
the API layer should answer with, and main.py registers a single handler
that turns any LexCorpError into {"detail": message}.
"""

from fastapi import status


class LexCorpError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(LexCorpError):
    """Rejected before any write; nothing was persisted."""
    status_code = status.HTTP_400_BAD_REQUEST


class DocumentLimitError(InvalidInputError):
    pass


class PermissionDeniedError(LexCorpError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action"


class BranchNotAssignedError(PermissionDeniedError):
    default_message = (
        "Your account is not assigned to a branch office yet. "
        "Ask your organization admin to assign one."
    )


class NotFoundError(LexCorpError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class OnboardingRequiredError(NotFoundError):
    default_message = "No organization found for this account. Complete your organization profile first."


class InviteNotFoundError(NotFoundError):
    default_message = "This invitation could not be found or has been revoked."


class ConflictError(LexCorpError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InviteAlreadyAcceptedError(ConflictError):
    default_message = "This invitation has already been accepted."


class UpstreamServiceError(LexCorpError):
    """A collaborator (LLM, object storage) failed; safe to retry."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "An upstream service failed. Please try again."
