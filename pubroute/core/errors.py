class PubrouteError(Exception):
    """Base class for errors raised by the event dispatch core."""


class DecodeError(PubrouteError):
    """
    Raised when an inbound payload cannot be turned into an event.

    Covers malformed bytes, a missing or unknown discriminator and field
    validation failures. Callers treat it as non-fatal: the message is
    logged and dropped.
    """


class RegistrationConflictError(PubrouteError):
    """Raised when two processors claim the same handler key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Processor already registered for '{key}'")
        self.key = key
