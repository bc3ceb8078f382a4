from __future__ import annotations

"""Exception types for configuration handling."""


class ConfigurationError(RuntimeError):
    """Raised when the supervisor's configuration is missing or malformed.

    A configuration error is fatal: the CLI reports it and exits with the
    "stop queue" status without launching anything.
    """

    @classmethod
    def missing_value(cls, param_name: str, context: str = "") -> "ConfigurationError":
        """Create error for missing value."""
        msg = f"{param_name} is missing or empty"
        if context:
            msg += f": {context}"
        return cls(msg)

    @classmethod
    def invalid_value(cls, param_name: str, value, reason: str = "") -> "ConfigurationError":
        """Create error for invalid value."""
        msg = f"Invalid value for {param_name}: {value!r}"
        if reason:
            msg += f". {reason}"
        return cls(msg)

    @classmethod
    def locator_field_missing(cls, field_name: str, locator: str) -> "ConfigurationError":
        """Create error for a locator whose required component is empty or absent."""
        return cls(f"Device locator {locator!r} does not define {field_name}")

    @classmethod
    def unknown_exit_policy(cls, value: str) -> "ConfigurationError":
        """Create error for an exit code policy that is neither numeric, named nor 'inherit'."""
        return cls(f"Unknown exit code policy {value!r}. Expected a number 0-255, a status name, or 'inherit'")

    @classmethod
    def defaults_unreadable(cls, path: str) -> "ConfigurationError":
        """Create error for a defaults file that exists but cannot be parsed."""
        return cls(f"Failed to load runtime defaults from {path}")


__all__ = ["ConfigurationError"]
