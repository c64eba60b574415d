"""
Centralized Exception Hierarchy for Perennial.

All custom exceptions inherit from PerennialError, so callers can catch
everything raised by this package in one place.

Each exception carries:
- error_code: Unique identifier (e.g., "PN-API-001")
- why_it_happened: Explanation of the root cause
- how_to_fix: Actionable steps to resolve the issue

Exception Hierarchy
-------------------
    PerennialError (base)
    ├── ValidationError
    │   └── ConfigValidationError
    ├── ConfigurationError
    ├── APIError
    ├── ConnectionError
    └── TimeoutError
        └── APITimeoutError

The interval projector never raises; these exceptions belong to the
configuration, client and CLI layers around it.
"""

from typing import Any, List, Optional
import builtins
import re


def sanitize_message(message: str) -> str:
    """Sanitize an error message to avoid leaking credentials.

    Masks bearer tokens, basic-auth credentials embedded in URLs, and
    API-key style assignments.

    Args:
        message: Original error message

    Returns:
        Sanitized message
    """
    if not message:
        return message

    patterns = [
        (r"Bearer\s+[a-zA-Z0-9_.-]+", r"Bearer <token>"),
        (r"://[^:/\s]+:[^@/\s]+@", r"://<user>:<pass>@"),
        (r"(api[_-]?key|token)([=:]\s*)[^\s&\"']+", r"\1\2<hidden>"),
    ]

    result = message
    for pattern, replacement in patterns:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)
    return result


def get_root_cause(exc: BaseException) -> BaseException:
    """Extract the root cause from a chain of exceptions.

    Follows __cause__ and __context__ to the original error.

    Args:
        exc: Exception to analyze

    Returns:
        Root cause exception (may be the same as input)
    """
    seen = set()
    current = exc

    while current is not None:
        if id(current) in seen:
            break
        seen.add(id(current))

        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__context__ is not None:
            current = current.__context__
        else:
            break

    return current


class PerennialError(Exception):
    """
    Base exception for all Perennial errors.

    Example
    -------
        try:
            client.update_profile_srs(profile_id, config)
        except PerennialError as e:
            logger.error(f"Save failed: {e}")
            print(f"Fix: {e.how_to_fix}")
    """

    error_code: str = "PN-ERR-000"
    why_it_happened: str = "An unexpected error occurred"
    how_to_fix: List[str] = ["Check the error message for details"]

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        """Initialize PerennialError with helpful information.

        Args:
            message: Human-readable error message
            error_code: Unique identifier (e.g., "PN-API-001")
            why_it_happened: Explanation of root cause
            how_to_fix: List of actionable fix suggestions
        """
        super().__init__(sanitize_message(message))

        if error_code is not None:
            self.error_code = error_code
        if why_it_happened is not None:
            self.why_it_happened = why_it_happened
        if how_to_fix is not None:
            self.how_to_fix = how_to_fix

    @property
    def user_message(self) -> str:
        """Get the user-friendly error message."""
        return str(self)

    def get_root_cause(self) -> BaseException:
        """Get the root cause of this exception chain."""
        return get_root_cause(self)


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(PerennialError):
    """
    Raised when user input fails validation.

    For example an unknown rating name passed on the command line.
    """

    error_code = "PN-VAL-000"
    why_it_happened = "Validation failed for input data or configuration"
    how_to_fix = [
        "Check the error message for specific validation failures",
        "Review the expected format or value constraints",
    ]


class ConfigValidationError(ValidationError):
    """
    Raised when configuration validation fails.

    Attributes
    ----------
    field : str
        The configuration field that failed validation
    value : any
        The invalid value
    """

    error_code = "PN-VAL-001"
    why_it_happened = (
        "A configuration value is invalid. "
        "The perennial.yaml file or a command option may hold a bad setting"
    )
    how_to_fix = [
        "Check perennial.yaml for syntax errors",
        "Use a positive base interval, an ease of at least 1.3, "
        "and a positive interval modifier",
        "Run 'perennial srs show' to view the current settings",
    ]

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        super().__init__(
            message,
            error_code=error_code,
            why_it_happened=why_it_happened,
            how_to_fix=how_to_fix,
        )
        self.field = field
        self.value = value


class ConfigurationError(PerennialError):
    """Raised when required settings are missing, such as an active profile."""

    error_code = "PN-CFG-001"
    why_it_happened = "A required setting is missing or no profile is available"
    how_to_fix = [
        "Create a profile: perennial profiles create <name>",
        "Pass --profile <id> or set PERENNIAL_PROFILE_ID",
    ]


# ============================================================================
# API Exceptions
# ============================================================================


class APIError(PerennialError):
    """
    Raised when the Perennial API answers with a non-success status.

    Attributes
    ----------
    status_code : int
        HTTP status returned by the server
    detail : str
        Response body text, if any
    """

    error_code = "PN-API-000"
    why_it_happened = "The Perennial API rejected the request"
    how_to_fix = [
        "Read the server message above for the specific reason",
        "Check that the profile or fact id exists",
        "Verify the API base URL: PERENNIAL_API_BASE_URL",
    ]

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        detail: str = "",
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        super().__init__(
            message,
            error_code=error_code,
            why_it_happened=why_it_happened,
            how_to_fix=how_to_fix,
        )
        self.status_code = status_code
        self.detail = detail


class TimeoutError(PerennialError):
    """
    Raised when an operation exceeds its time limit.

    Note: This shadows the built-in TimeoutError intentionally.
    """

    error_code = "PN-INFRA-002"
    why_it_happened = "The operation took too long and was terminated"
    how_to_fix = [
        "Try again in a few minutes",
        "Increase the timeout: PERENNIAL_TIMEOUT=30",
    ]


class APITimeoutError(TimeoutError):
    """Raised when a request to the Perennial API times out."""

    error_code = "PN-API-001"
    why_it_happened = (
        "The API request timed out waiting for a response. "
        "The server may be overloaded or your connection may be slow"
    )
    how_to_fix = [
        "Check that the API server is running",
        "Try again in a few minutes",
        "Increase the timeout: PERENNIAL_TIMEOUT=30",
    ]


class ConnectionError(PerennialError):
    """
    Raised when the API server cannot be reached.

    Note: This shadows the built-in ConnectionError intentionally.
    """

    error_code = "PN-CONN-001"
    why_it_happened = (
        "Could not establish a network connection. "
        "The API server may be down or the base URL may be wrong"
    )
    how_to_fix = [
        "Check that the API server is running",
        "Verify the base URL: PERENNIAL_API_BASE_URL or api.base_url in perennial.yaml",
        "Check if a firewall or proxy is blocking the connection",
    ]


# ============================================================================
# Error Info Lookup
# ============================================================================


STANDARD_ERROR_INFO: dict[type, dict[str, Any]] = {
    builtins.FileNotFoundError: {
        "error_code": "PN-FILE-001",
        "why_it_happened": "The specified file or directory could not be found",
        "how_to_fix": [
            "Check that the file path is correct",
            "Ensure you have read permissions for the file",
        ],
    },
    builtins.PermissionError: {
        "error_code": "PN-FILE-002",
        "why_it_happened": "You don't have permission to access this file or directory",
        "how_to_fix": [
            "Check file permissions: ls -la <file>",
            "Ensure you own the file or have read/write access",
        ],
    },
    builtins.ConnectionError: {
        "error_code": "PN-CONN-001",
        "why_it_happened": "Could not establish a network connection",
        "how_to_fix": [
            "Check that the API server is running",
            "Verify the URL or server address",
        ],
    },
    builtins.TimeoutError: {
        "error_code": "PN-INFRA-002",
        "why_it_happened": "The operation took too long and was terminated",
        "how_to_fix": [
            "Check your network connection",
            "Try again in a few minutes",
        ],
    },
    KeyError: {
        "error_code": "PN-CFG-002",
        "why_it_happened": "A required key is missing",
        "how_to_fix": [
            "Check your perennial.yaml configuration file",
            "Check that the server response has the expected shape",
        ],
    },
    ValueError: {
        "error_code": "PN-VAL-002",
        "why_it_happened": "An invalid value was provided",
        "how_to_fix": [
            "Check the error message for the expected value format",
            "Verify your input matches the required type",
        ],
    },
    TypeError: {
        "error_code": "PN-VAL-003",
        "why_it_happened": "A value of the wrong type was provided",
        "how_to_fix": [
            "Check that you're passing the correct argument types",
        ],
    },
    OSError: {
        "error_code": "PN-SYS-001",
        "why_it_happened": "A system-level error occurred",
        "how_to_fix": [
            "Check disk space and permissions",
            "Review system logs for more details",
        ],
    },
}


def get_error_info(exc: BaseException) -> dict[str, Any]:
    """Get helpful error information for any exception.

    Args:
        exc: Exception to get info for

    Returns:
        Dict with error_code, why_it_happened, how_to_fix
    """
    if isinstance(exc, PerennialError):
        return {
            "error_code": exc.error_code,
            "why_it_happened": exc.why_it_happened,
            "how_to_fix": exc.how_to_fix,
        }

    exc_type = type(exc)
    if exc_type in STANDARD_ERROR_INFO:
        return STANDARD_ERROR_INFO[exc_type]

    for parent_type, info in STANDARD_ERROR_INFO.items():
        if isinstance(exc, parent_type):
            return info

    return {
        "error_code": "PN-ERR-999",
        "why_it_happened": "An unexpected error occurred",
        "how_to_fix": [
            "Check the error message for details",
            "Re-run with --verbose to see the traceback",
            "Report the issue if it persists",
        ],
    }
