"""Exception types raised by the service layer."""

from __future__ import annotations


class DrawingTrainerError(RuntimeError):
    """Base class for errors the UI should show to the user."""


class PersistenceError(DrawingTrainerError):
    """The store rejected a read or write."""


class SessionStateError(DrawingTrainerError):
    """An operation was invalid for the session's current lifecycle state."""
