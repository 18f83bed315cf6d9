"""Authentication exceptions.

These exceptions are raised by the gatehouse_auth package and should be
caught and handled by the application layer (AuthenticationService) or the
API exception handlers.
"""


class AuthError(Exception):
    """Base exception for all authentication errors."""

    def __init__(self, message: str = "Authentication error"):
        self.message = message
        super().__init__(self.message)


class InvalidTokenError(AuthError):
    """Raised when a JWT token is invalid, expired, or malformed."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class InvalidSignatureError(InvalidTokenError):
    """Raised when a token signature does not match any trusted key."""

    def __init__(self, message: str = "Token signature verification failed"):
        super().__init__(message)


class TokenExpiredError(InvalidTokenError):
    """Raised when a token is past its expiry."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message)


class MalformedTokenError(InvalidTokenError):
    """Raised when a token cannot be decoded or lacks required claims."""

    def __init__(self, message: str = "Malformed token"):
        super().__init__(message)


class InvalidRefreshTokenError(AuthError):
    """Raised when a refresh token's session has been revoked or expired."""

    def __init__(self, message: str = "Invalid refresh token"):
        super().__init__(message)


class WeakPasswordError(AuthError):
    """Raised when a password doesn't meet strength requirements."""

    def __init__(self, message: str = "Password does not meet requirements"):
        super().__init__(message)


class InvalidCredentialsError(AuthError):
    """Raised when email or password is incorrect during login.

    The message is the same for unknown emails and wrong passwords.
    """

    def __init__(self, message: str = "Email or Password does not match."):
        super().__init__(message)


class KeyMaterialError(AuthError):
    """Raised when the access token signing key is absent or unusable."""

    def __init__(self, message: str = "Signing key material is not configured"):
        super().__init__(message)


class KeySetUnavailableError(AuthError):
    """Raised when the published key set cannot be fetched or parsed."""

    def __init__(self, message: str = "Signing key set is unavailable"):
        super().__init__(message)


class MissingTokenError(InvalidTokenError):
    """Raised when a request carries no token where one is required."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)
