from __future__ import annotations


class EngineError(RuntimeError):
    """Base class for recoverable rule violations raised by the engine."""


class DeckEmpty(EngineError):
    pass


class IllegalPlay(EngineError):
    pass


class CardNotInHand(EngineError):
    pass


class NoLegalMove(EngineError):
    pass
