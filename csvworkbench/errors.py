"""Errors raised inside the converters before they are folded into results."""


class ConversionError(ValueError):
    pass


class ParseError(ConversionError):
    """Malformed structured input: bad JSON/XML syntax or record shape."""


class EmptyInputError(ConversionError):
    """Nothing left to tabulate after parsing or flattening."""
