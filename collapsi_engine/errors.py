from __future__ import annotations


class CollapsiError(Exception):
    """Base class for every error raised by the Collapsi engine."""


class InvalidSetup(CollapsiError, ValueError):
    """Bad player count / board size combination when starting a game."""


class IncompatibleBoardSize(CollapsiError, ValueError):
    """A coordinate was used with a board of a different size."""


class IllegalMove(CollapsiError, ValueError):
    """The requested step fails the legality check."""


class InvalidState(CollapsiError, RuntimeError):
    """An operation was invoked in a state that does not allow it."""


class NoHistory(InvalidState):
    """Undo or redo was requested with an empty stack."""
