"""Custom exception hierarchy for release-automation.

This module defines the exceptions raised by the service adapters and the
release orchestrator. Every adapter failure is translated into one of these
types so that callers only ever need to handle a single family of errors.

Exception Hierarchy:
    ReleaseAutomationError (base)
    ├── ConfigurationError
    └── UpstreamError
        └── NotFoundError

Example Usage:
    >>> from release_automation.exceptions import UpstreamError
    >>> try:
    ...     response.raise_for_status()
    ... except httpx.HTTPStatusError as e:
    ...     raise UpstreamError("Failed to create test plan", service="testrail") from e
"""


class ReleaseAutomationError(Exception):
    """Base exception for all release-automation errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(ReleaseAutomationError):
    """Configuration-related errors.

    Raised once, before any orchestration starts, when required settings are
    missing or invalid. The process does not proceed.

    Attributes:
        missing: Names of the environment variables that were not set
    """

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        self.missing = missing or []
        super().__init__(message)


class UpstreamError(ReleaseAutomationError):
    """An external service call failed.

    Covers network failures, authentication failures and validation errors
    reported by the remote service. The original cause is always chained
    with ``raise ... from``.

    Attributes:
        message: Error message without the HTTP status suffix
        service: Name of the service that failed (github, jira, testrail, confluence)
        status_code: HTTP status code (if applicable)
        response_text: Response body text (if applicable)
    """

    def __init__(
        self,
        message: str,
        service: str | None = None,
        status_code: int | None = None,
        response_text: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            service: Name of the failing service
            status_code: HTTP status code (if applicable)
            response_text: Response body text (if applicable)
        """
        self.service = service
        self.status_code = status_code
        self.response_text = response_text

        full_message = message
        if service:
            full_message = f"[{service}] {full_message}"
        if status_code:
            full_message = f"{full_message} (HTTP {status_code})"

        super().__init__(full_message)
        # Preserve original message
        self.message = message


class NotFoundError(UpstreamError):
    """An expected remote entity is absent.

    Examples:
        - Release tag does not exist
        - Report page has no TestRail placeholder link
        - Test case project has no suites
    """

    pass

