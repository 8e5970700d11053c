from __future__ import annotations


class HirescoutError(Exception):
    """Base class for errors raised by hirescout itself."""


class StoreReadError(HirescoutError):
    """A backing store exists but could not be read or decoded.

    A missing store is not an error (it reads as an empty collection); this is
    raised for everything else so that corruption is never mistaken for
    "no data yet".
    """

    def __init__(self, source: str, reason: str):
        super().__init__(f"failed to read {source}: {reason}")
        self.source = source
        self.reason = reason


class UnknownStageError(HirescoutError, ValueError):
    def __init__(self, stage: str):
        super().__init__(f"unknown pipeline stage '{stage}'")
        self.stage = stage


class IllegalStageTransitionError(HirescoutError, ValueError):
    def __init__(self, current: str, target: str):
        super().__init__(f"cannot move candidate from '{current}' to '{target}'")
        self.current = current
        self.target = target
