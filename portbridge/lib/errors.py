"""Structured exception hierarchy for the host bridge.

Provides specific exception types for the bridge's failure modes,
with rich context for debugging and troubleshooting.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

__all__ = [
    "BridgeError",
    "ConfigurationError",
    "UnitLoadError",
    "PortError",
    "PortClosedError",
    "OutputWriteError",
]


class BridgeError(Exception):
    """Base exception for all bridge errors.

    Provides structured error information for debugging.
    """

    def __init__(
        self,
        message: str,
        *,
        port: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.port = port
        self.details = details or {}
        self.suggestion = suggestion

        # Build full message
        parts = [message]

        if port:
            parts.insert(0, f"[{port}]")

        if details:
            detail_lines = [f"  {k}: {v}" for k, v in details.items()]
            parts.append("\nDetails:")
            parts.extend(detail_lines)

        if suggestion:
            parts.append(f"\nSuggestion: {suggestion}")

        super().__init__("\n".join(parts) if len(parts) > 1 else message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": str(self.args[0]) if self.args else "",
            "port": self.port,
            "details": self.details,
            "suggestion": self.suggestion,
        }


class ConfigurationError(BridgeError):
    """Error in bridge configuration.

    Raised when the YAML config or CLI overrides are invalid.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value

        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)

        super().__init__(message, details=details, **kwargs)


class UnitLoadError(BridgeError):
    """The computation unit could not be resolved or constructed."""

    def __init__(
        self,
        message: str,
        *,
        reference: Optional[str] = None,
        cause: Optional[Exception] = None,
        **kwargs: Any,
    ) -> None:
        self.reference = reference
        self.cause = cause

        details = kwargs.pop("details", {})
        if reference:
            details["reference"] = reference
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__

        suggestion = kwargs.pop("suggestion", None)
        if not suggestion:
            suggestion = (
                "Use 'package.module:Name' or 'path/to/file.py:Name' and make "
                "sure the factory takes no arguments."
            )

        super().__init__(message, details=details, suggestion=suggestion, **kwargs)


class PortError(BridgeError):
    """Invalid use of a port.

    Raised for unknown port names, non-text payloads, sends on a closed
    port, or a second subscriber on an output port.
    """

    def __init__(
        self,
        message: str,
        *,
        port: Optional[str] = None,
        known_ports: Optional[List[str]] = None,
        **kwargs: Any,
    ) -> None:
        self.known_ports = known_ports or []

        details = kwargs.pop("details", {})
        if known_ports:
            details["known_ports"] = ", ".join(known_ports)

        super().__init__(message, port=port, details=details, **kwargs)


class PortClosedError(PortError):
    """A port was closed and has no more payloads to deliver."""


class OutputWriteError(BridgeError):
    """Writing an output payload failed.

    This error is fatal: the bridge stops the run instead of retrying.
    """

    def __init__(
        self,
        message: str,
        *,
        port: Optional[str] = None,
        path: Optional[str] = None,
        cause: Optional[Exception] = None,
        **kwargs: Any,
    ) -> None:
        self.path = path
        self.cause = cause

        details = kwargs.pop("details", {})
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__

        super().__init__(message, port=port, details=details, **kwargs)
