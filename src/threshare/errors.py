"""Error kinds raised by threshare.

Every failure is a distinct exception type so callers can tell
"not enough shares" apart from "shares are corrupt" apart from
"misconfiguration". Messages never carry secret material: at most a
share's x-coordinate or a public modulus.
"""

from typing import Optional


class ThresholdError(Exception):
    """Base class for all threshare errors."""


class InvalidParameters(ThresholdError, ValueError):
    """Threshold, share count, field parameters or secret are unusable."""


class InsufficientShares(ThresholdError, ValueError):
    """Fewer shares than the threshold were supplied."""

    def __init__(self, needed: int, got: int):
        super().__init__(f"Need at least {needed} shares, got {got}")
        self.needed = needed
        self.got = got


class NotInvertible(ThresholdError, ZeroDivisionError):
    """An element has no multiplicative inverse modulo the given modulus."""

    def __init__(self, value: int, modulus: int, message: Optional[str] = None):
        if message is None:
            message = f"{value} is not invertible modulo {modulus}"
        super().__init__(message)
        self.value = value
        self.modulus = modulus


class NonInvertibleDenominator(NotInvertible):
    """A Lagrange denominator vanished: two shares share an x-coordinate."""

    def __init__(self, x: int, modulus: int):
        super().__init__(
            0, modulus,
            f"Duplicate share x-coordinate {x} (mod {modulus}); "
            "Lagrange denominator is zero",
        )
        self.x = x


class ShareVerificationFailed(ThresholdError):
    """A share is inconsistent with the published commitment."""

    def __init__(self, x: int):
        super().__init__(f"Share at x={x} failed commitment verification")
        self.x = x


class RandomnessUnavailable(ThresholdError):
    """The random source could not produce output."""
