# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions raised by the notification engine.

Channel delivery problems are never raised to fan-out callers; they end
up as a failed entry in the notification's status map. Everything here
is either a configuration mistake or a store problem the caller must
handle.
"""

from typing import Optional


class NotificationError(Exception):
    """Base exception for notification engine errors."""

    pass


class UnknownStageError(NotificationError):
    """Raised when a lifecycle stage has no registered template bundle.

    Attributes:
        stage: The stage value that could not be resolved.
    """

    def __init__(self, stage: object) -> None:
        stage_value = getattr(stage, "value", stage)
        super().__init__(f"No template registered for stage: {stage_value}")
        self.stage = stage_value


class TemplateConfigurationError(NotificationError):
    """Raised when a template bundle is malformed."""

    pass


class InvalidStatusTransitionError(NotificationError):
    """Raised when a channel status change breaks the delivery state machine."""

    pass


class NotificationStoreError(NotificationError):
    """Base exception for notification store operations.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying exception, if any.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the store error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class StoreUnavailableError(NotificationStoreError):
    """Raised when the store cannot be reached at all."""

    pass
