class LowbornError(Exception):
    """Base class for errors raised by the watch-command engine."""


class StateValidationError(LowbornError, ValueError):
    """A snapshot or payload broke a structural invariant."""


class SaveSlotNotFoundError(LowbornError, KeyError):
    def __init__(self, slot: str) -> None:
        super().__init__(slot)
        self.slot = slot

    def __str__(self) -> str:
        return f"No save stored in slot '{self.slot}'."
