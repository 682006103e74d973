from __future__ import annotations

from typing import Any, Optional


class PocketKnifeError(Exception):
    """Base class for every error the CLI reports to the user."""


class InvalidInputError(PocketKnifeError):
    """A user-supplied value is malformed or out of range (exit code 2)."""

    def __init__(self, message: str, *, field: Optional[str] = None, value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class CalculationError(PocketKnifeError):
    pass


class CLIError(PocketKnifeError):
    """Incorrect command usage (missing or extra arguments)."""


class ProductNotFoundError(PocketKnifeError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Product '{name}' not found")
        self.name = name


class DuplicateProductError(PocketKnifeError):
    def __init__(self, name: str) -> None:
        super().__init__(f'Product "{name}" already exists')
        self.name = name


class StorageUnavailableError(PocketKnifeError):
    """The SQLite driver could not be loaded."""


class ConfigurationError(PocketKnifeError):
    pass


class MissingAPIKeyError(ConfigurationError):
    pass


class InvalidAPIKeyError(ConfigurationError):
    pass


class AssistantError(PocketKnifeError):
    """The language-model request failed."""


class AssistantConnectionError(AssistantError):
    pass


class AssistantTimeoutError(AssistantError):
    pass


class AssistantAuthError(AssistantError):
    pass


class AssistantRateLimitError(AssistantError):
    pass
