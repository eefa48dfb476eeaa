"""Exceptions raised by the preferred-value engine."""


class InvalidInputError(ValueError):
    """A malformed argument: wrong type, shape, or unrecognized option.

    Individual array elements that cannot be rounded (zero, negative,
    infinite, NaN) are not errors; they come back as NaN.
    """
