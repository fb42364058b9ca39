"""Domain exceptions raised by services and translated to HTTP responses in main."""


class DineFlowError(Exception):
    """Base class for errors surfaced to the user as a short notice."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthorizationError(DineFlowError):
    """Actor's role does not permit the requested action."""

    status_code = 403


class ValidationError(DineFlowError):
    """Request is missing required data or references something unusable."""

    status_code = 400


class NotFoundError(DineFlowError):
    """Entity does not exist in the caller's business."""

    status_code = 404


class ConflictError(DineFlowError):
    """Duplicate or state conflict detected by a pre-check read."""

    status_code = 409


class BusinessSetupRequired(DineFlowError):
    """Caller has not created or joined a business yet."""

    status_code = 409

    def __init__(self, message: str = "Business setup required"):
        super().__init__(message)


class IdentityProviderError(DineFlowError):
    """Federated identity token could not be verified."""

    status_code = 401
