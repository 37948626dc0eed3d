class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class PersistenceError(DomainError):
    """Raised when the remote data gateway reports a failure."""


class NotFoundError(PersistenceError):
    """Raised when an update or delete matched no row."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class InvalidCredentialsError(AuthenticationError):
    """Same error for unknown email and wrong password."""


class DuplicateUserError(DomainError):
    """Raised when registering an email that already exists."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class IdentityProviderError(DomainError):
    """Raised when the hosted identity provider rejects a request."""


class SubscriptionError(DomainError):
    """Raised when a change-feed channel cannot be opened."""
