"""Custom exception hierarchy for dictate-ai."""


class DictateAIError(Exception):
    """Base exception for all dictate-ai errors."""

    pass


class ConfigError(DictateAIError):
    """Configuration-related errors."""

    pass


class ProviderError(DictateAIError):
    """Errors raised by an AI enhancement provider.

    Attributes:
        provider: Display name of the provider that failed.
    """

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider


class MissingCredentialError(ProviderError):
    """A remote provider was called without an API key."""

    def __init__(self, provider: str) -> None:
        super().__init__(provider, f"{provider} API key is required")


class UnreachableError(ProviderError):
    """Network failure or timeout talking to a provider."""

    pass


class BadStatusError(ProviderError):
    """Provider answered with a non-200 status.

    The raw response body is kept so provider diagnostics reach the user.
    """

    def __init__(self, provider: str, status_code: int, body: str) -> None:
        detail = body.strip() or "no response body"
        super().__init__(provider, f"HTTP {status_code}: {detail}")
        self.status_code = status_code
        self.body = body


class DecodeFailureError(ProviderError):
    """A model catalog body could not be parsed."""

    pass


class EmptyResponseError(ProviderError):
    """A completion response yielded no text from either decode tier."""

    def __init__(self, provider: str) -> None:
        super().__init__(provider, f"{provider} returned no response text")


class CapabilityUnsupportedError(ProviderError):
    """The provider does not implement an optional capability."""

    def __init__(self, provider: str) -> None:
        super().__init__(provider, f"{provider} does not support image analysis")


class InvalidRequestError(ProviderError):
    """The caller supplied unusable input (no model, empty image)."""

    pass


class ModelLifecycleError(DictateAIError):
    """On-device model download or warm-up errors.

    Attributes:
        model: Name of the model involved.
    """

    def __init__(self, model: str, message: str) -> None:
        super().__init__(message)
        self.model = model


class ModelDownloadError(ModelLifecycleError):
    """Model download or deletion failed."""

    pass


class ModelPrewarmError(ModelLifecycleError):
    """Model could not be loaded ahead of first use."""

    pass
