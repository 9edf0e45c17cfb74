"""
Exceptions raised by the calculator.

``DivisionByZeroError`` and ``InvalidInputError`` come out of the arithmetic
kernels and are turned into the engine's error mode by the reducer.
``TokenError`` is raised for input that cannot be decoded into a token at all.
"""


class CalculatorError(Exception):
    """Base exception for calculator errors."""
    pass


class DivisionByZeroError(CalculatorError):
    """Raised when dividing by zero or taking the reciprocal of zero."""
    pass


class InvalidInputError(CalculatorError):
    """Raised when a function's argument is outside its domain."""
    pass


class TokenError(ValueError):
    """Raised when a key name or history reference cannot be resolved."""
    pass
