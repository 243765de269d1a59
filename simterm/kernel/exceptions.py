"""Core exception hierarchy for simterm.

All engine errors inherit from :class:`SimTermError`. The dispatcher turns
them into ``error`` output entries; nothing raised here is fatal to a
running terminal session.
"""

from __future__ import annotations

# ============================================================================
# Base Exception
# ============================================================================


class SimTermError(Exception):
    """Base exception for all simterm errors.

    Catch this to handle every engine-level failure.
    """

    pass


# ============================================================================
# Configuration & Validation Errors
# ============================================================================


class ConfigurationError(SimTermError):
    """Raised when configuration is invalid or missing.

    Examples
    --------
    Example usage::

        raise ConfigurationError("history", "max_size must be an integer")
    """

    def __init__(self, component: str, reason: str) -> None:
        """Initialize configuration error.

        Args
        ----
            component: Name of the component with invalid configuration
            reason: Explanation of what's wrong
        """
        super().__init__(f"Configuration error in '{component}': {reason}")
        self.component = component
        self.reason = reason


class ValidationError(SimTermError):
    """Raised when data validation fails.

    Examples
    --------
    Example usage::

        raise ValidationError("format", "must be json, csv or txt", value="xml")
    """

    def __init__(self, field: str, constraint: str, value: object = None) -> None:
        """Initialize validation error.

        Args
        ----
            field: Name of the field that failed validation
            constraint: Description of the validation constraint
            value: The invalid value (optional)
        """
        if value is not None:
            msg = f"Validation failed for '{field}': {constraint} (got {value!r})"
        else:
            msg = f"Validation failed for '{field}': {constraint}"
        super().__init__(msg)
        self.field = field
        self.constraint = constraint
        self.value = value


class ImportValidationError(ValidationError):
    """Raised when an imported history or session blob is rejected.

    The import is all-or-nothing: when this is raised no state was merged.
    """

    def __init__(self, source: str, reason: str) -> None:
        """Initialize import validation error.

        Args
        ----
            source: What was being imported (e.g. ``"session"``, ``"history"``)
            reason: Why the data was rejected
        """
        super().__init__(source, reason)
        self.source = source
        self.reason = reason


# ============================================================================
# Resource Errors
# ============================================================================


class ResourceNotFoundError(SimTermError):
    """Raised when a required resource cannot be found.

    Examples
    --------
    Example usage::

        raise ResourceNotFoundError("tab", "tab-9", ["tab-1", "tab-2"])
    """

    def __init__(
        self, resource_type: str, resource_id: str, available: list[str] | None = None
    ) -> None:
        """Initialize resource not found error.

        Args
        ----
            resource_type: Type of resource (e.g., "tab", "process", "language")
            resource_id: Identifier of the missing resource
            available: List of available resources (optional)
        """
        msg = f"{resource_type.title()} '{resource_id}' not found"
        if available:
            msg += f". Available: {', '.join(available[:5])}"
            if len(available) > 5:
                msg += f" ... and {len(available) - 5} more"
        super().__init__(msg)
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.available = available


class VFSError(SimTermError):
    """Raised when a virtual filesystem operation fails.

    Examples
    --------
    Example usage::

        raise VFSError("/home/developer/missing.txt", "no such file or directory")
    """

    def __init__(self, path: str, reason: str) -> None:
        """Initialize VFS error.

        Args
        ----
            path: The VFS path that caused the error
            reason: Explanation of what went wrong
        """
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


# ============================================================================
# Command Errors
# ============================================================================


class CommandNotFoundError(SimTermError):
    """Raised when a command name is not present in the dispatch table."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Command not found: {name}. Type 'help' for available commands.")
        self.name = name


class UsageError(SimTermError):
    """Raised by a command handler when a required argument is missing.

    The message is the usage line shown to the user, e.g.
    ``Usage: mkdir <directory-name>``.
    """

    def __init__(self, usage: str) -> None:
        super().__init__(f"Usage: {usage}")
        self.usage = usage


class SecurityRejectionError(SimTermError):
    """Raised when input is refused by the security policy."""

    def __init__(self, reason: str, value: str | None = None) -> None:
        super().__init__(f"Command blocked: {reason}")
        self.reason = reason
        self.value = value


class CommandTimeoutError(SimTermError):
    """Raised when a command handler exceeds its time budget."""

    def __init__(self, name: str, timeout: float) -> None:
        super().__init__(f"Command '{name}' timed out after {timeout}s")
        self.name = name
        self.timeout = timeout


# ============================================================================
# Persistence Errors
# ============================================================================


class PersistenceError(SimTermError):
    """Raised when a persistence port fails to load or save.

    Examples
    --------
    Example usage::

        raise PersistenceError("history.json", "permission denied")
    """

    def __init__(self, store: str, reason: str) -> None:
        """Initialize persistence error.

        Args
        ----
            store: Name or location of the backing store
            reason: Explanation of what went wrong
        """
        super().__init__(f"Persistence error in '{store}': {reason}")
        self.store = store
        self.reason = reason



# ============================================================================
# Service Errors
# ============================================================================


class AIServiceError(SimTermError):
    """Raised by an AI enhancer adapter when its backend cannot answer.

    Examples
    --------
    Example usage::

        raise AIServiceError("enhance", "connection refused")
    """

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"AI {operation} failed: {reason}")
        self.operation = operation
        self.reason = reason


__all__ = [
    # Base
    "SimTermError",
    # Configuration & Validation
    "ConfigurationError",
    "ImportValidationError",
    "ValidationError",
    # Resources
    "ResourceNotFoundError",
    "VFSError",
    # Commands
    "CommandNotFoundError",
    "CommandTimeoutError",
    "SecurityRejectionError",
    "UsageError",
    # Persistence
    "PersistenceError",
    # Services
    "AIServiceError",
]
