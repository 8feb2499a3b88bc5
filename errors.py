from typing import Optional


class MoviesServerError(Exception):
    """Base class for errors raised by the movies server"""


class ConfigurationError(MoviesServerError):
    """Missing or invalid configuration"""


class InvocationError(MoviesServerError):
    """Malformed tool invocation (missing arguments, unknown tool)"""


class UpstreamError(MoviesServerError):
    """TMDB answered with a non-2xx status or could not be reached.

    ``status_code`` is None for transport failures (DNS, refused connection,
    timeout); ``reason`` then holds the failure text.
    """

    def __init__(self, status_code: Optional[int], reason: str):
        self.status_code = status_code
        self.reason = reason
        if status_code is None:
            message = f"TMDB API request failed: {reason}"
        else:
            message = f"TMDB API error: {status_code} {reason}"
        super().__init__(message)


class DecodeError(MoviesServerError):
    """TMDB returned a success status with a body that is not valid JSON"""


class SessionNotFoundError(MoviesServerError):
    def __init__(self, session_id: Optional[str]):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")
