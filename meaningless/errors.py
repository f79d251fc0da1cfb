from __future__ import annotations


class GameError(ValueError):
    """Base class for game-core failures.

    Derives from ValueError so route handlers can keep a single `except ValueError`
    path, while callers that care can branch on the concrete kind.
    """


class InitializationError(GameError):
    pass


class SelectionError(GameError):
    pass


class NotFoundError(GameError):
    pass


class NoSessionError(GameError):
    pass


class NoActiveRoundError(GameError):
    pass


class AlreadyCompletedError(GameError):
    pass


class InvalidOptionError(GameError):
    pass


class NoCompletedRoundError(GameError):
    pass


class InvalidSessionError(GameError):
    pass


class GameBusyError(GameError):
    pass


class CatalogLoadError(RuntimeError):
    pass
