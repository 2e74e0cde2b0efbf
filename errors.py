"""
Failure reasons raised by the unit registry and the conversion engine.

Every error carries a ``user_message`` that the web page shows in its alert,
so callers never have to map exception types to text themselves.
"""


class ConversionError(ValueError):
    """Base class for every conversion failure."""

    user_message = "Conversion failed."

    def __init__(self, detail=None):
        self.detail = detail
        super().__init__(detail or self.user_message)


class InvalidValue(ConversionError):
    """The supplied value is not a finite real number."""

    user_message = "Please enter a valid number."


class MissingSelection(ConversionError):
    """One or both unit selections are absent."""

    user_message = "Please fill all fields."


class IncompatibleUnits(ConversionError):
    """The two units do not belong to the same category."""

    user_message = "Incompatible unit types selected."


class UnknownCategory(ConversionError, KeyError):
    user_message = "Unknown unit category."

    def __str__(self):
        # KeyError quotes its argument; keep the plain message instead
        return ValueError.__str__(self)


class UnknownUnit(ConversionError, KeyError):
    user_message = "Unknown unit."

    def __str__(self):
        return ValueError.__str__(self)
