"""Exception types raised by the analysis core"""


class TonalDomainError(ValueError):
    """Invalid numeric input to an analysis function.

    Raised for out-of-range pitch classes or MIDI values, non-positive
    frequencies or window sizes, empty required collections and similar
    violations. Functions never clamp or return NaN in place of raising.
    """
