class TrainerMatchingError(Exception):
    """Base class for errors raised by the trainer matching engine."""

    pass


class InvalidMatchingRequest(TrainerMatchingError):
    """Raised when a request lacks a province, specialization or requested date, or the result cap is not positive."""

    pass


class MatchingFailure(TrainerMatchingError):
    """Raised when the trainer pool or the applicant set could not be fetched."""

    def __init__(self, message: str = "Failed to find matching trainers"):
        super().__init__(message)


class RequestNotFound(TrainerMatchingError):
    """Raised when the referenced training request does not exist."""

    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__("Training request not found")


class DeliveryError(TrainerMatchingError):
    """Both the push channel and the persisted record failed for a notification."""

    pass


class PushConfigurationError(TrainerMatchingError):
    """Raised when OneSignal credentials are missing."""

    pass
