"""Service-layer exceptions, mapped to HTTP status codes by the API layer."""


class ServiceException(Exception):
    """Base exception for service layer errors."""


class SeekerNotFoundException(ServiceException):
    """Raised when a seeker profile does not exist."""


class JobPostingNotFoundException(ServiceException):
    """Raised when a job posting does not exist."""


class EmptyProfileException(ServiceException):
    """Raised when a CV yields no taxonomy skills at all."""


class EmailAlreadyRegisteredException(ServiceException):
    """Raised when a new profile reuses an email that already has an account."""
