"""Error taxonomy for the integration handler framework.

Every error carries the provider id and, where one is involved, the action id
so callers can decide whether to re-authenticate, fix the workflow, or retry.
Nothing in this package retries on its own; ``retryable`` is advice for the
caller's backoff policy.
"""

from typing import Any, Dict, Optional


class IntegrationError(Exception):
    """Base exception for all integration framework errors."""

    error_code = "INTEGRATION_ERROR"

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        action: Optional[str] = None,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.action = action
        self.status_code = status_code
        self.code = code
        self.retryable = retryable

    @property
    def context(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "action": self.action,
            "status_code": self.status_code,
            "code": self.code,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a JSON-safe dictionary for API responses and logs."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
            "retryable": self.retryable,
        }


class UnknownProviderError(IntegrationError):
    """No handler is registered under the requested provider id."""

    error_code = "UNKNOWN_PROVIDER"

    def __init__(self, provider: Optional[str], message: Optional[str] = None):
        super().__init__(
            message or f"No handler registered for provider '{provider}'",
            provider=provider,
        )


class UnsupportedActionError(IntegrationError):
    """The provider does not declare the requested action type."""

    error_code = "UNSUPPORTED_ACTION"

    def __init__(self, provider: str, action: str):
        super().__init__(
            f"Unsupported {provider} action: '{action}'",
            provider=provider,
            action=action,
        )


class ConfigValidationError(IntegrationError):
    error_code = "CONFIG_VALIDATION_ERROR"


class IntegrationNotFoundError(IntegrationError):
    error_code = "INTEGRATION_NOT_FOUND"


class InvalidActionInputError(IntegrationError):
    """Action parameters do not satisfy the action's input schema."""

    error_code = "INVALID_ACTION_INPUT"

    def __init__(self, provider: str, action: str, problems: list):
        super().__init__(
            f"Invalid input for {provider} action '{action}': {'; '.join(problems)}",
            provider=provider,
            action=action,
        )
        self.problems = list(problems)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["problems"] = self.problems
        return data


class AuthError(IntegrationError):
    """Credential missing, expired or rejected; the user has to re-authorize."""

    error_code = "AUTHENTICATION_ERROR"


class ProviderCallError(IntegrationError):
    """The provider API returned a failure or could not be reached."""

    error_code = "PROVIDER_CALL_ERROR"

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("retryable", True)
        super().__init__(message, **kwargs)


class ProviderTimeoutError(ProviderCallError):
    error_code = "PROVIDER_TIMEOUT"
