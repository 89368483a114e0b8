"""Typed failures raised by the pitch engine."""


class PitchError(Exception):
    """Base class for every failure raised by pitchwork."""


class InvalidArgumentError(PitchError, ValueError):
    """A required numeric or name argument is missing, non-numeric or unknown."""


class InvalidFrequencyError(PitchError, ValueError):
    """A frequency is not a finite, positive number of hertz."""


class NoNoteError(PitchError):
    """A pitch was played while no note scope is open and the voice is not measuring."""


class UnresolvedAccidentalError(PitchError, ValueError):
    """An accidental token is not part of the recognised accidental set."""

    def __init__(self, token: object) -> None:
        super().__init__(f"Unrecognised accidental {token!r}.")
        self.token = token
