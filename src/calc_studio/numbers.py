"""
Arithmetic kernels and display conversions.

Everything here is a plain function over floats. Domain failures raise
``DivisionByZeroError`` or ``InvalidInputError``; results that are merely
non-finite (``log(0)``, ``0 ^ -1``, overflow) are returned as IEEE values
so they can be shown on the display.
"""

import math
import re

from calc_studio.exceptions import DivisionByZeroError, InvalidInputError
from calc_studio.models import Operator, ScientificFunction

# Longest numeric prefix of a display string, e.g. "12." or "3.5e-7".
_NUMERIC_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# Integral values below this print without an exponent.
_PLAIN_INTEGER_LIMIT = 1e21

# Smallest decimal exponent printed without exponent notation (0.000001).
_PLAIN_SMALL_EXPONENT = -6


# =============================================================================
# Display Conversions
# =============================================================================

def parse_display(text: str) -> float:
    """
    Convert display text into a number.

    Accepts anything ``float()`` accepts (including ``NaN`` and ``Infinity``)
    and otherwise falls back to the longest numeric prefix, so a partial
    entry such as ``"5."`` reads as 5. Text without a numeric prefix is NaN.
    """
    try:
        return float(text)
    except ValueError:
        pass
    match = _NUMERIC_PREFIX.match(text)
    if match is None:
        return math.nan
    return float(match.group(0).rstrip("."))


def format_number(value: float) -> str:
    """Render a number for the display and for history entries."""
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < _PLAIN_INTEGER_LIMIT:
        return str(int(value))

    text = repr(value)
    if "e" not in text:
        return text

    mantissa, exponent = text.split("e")
    exp = int(exponent)
    if _PLAIN_SMALL_EXPONENT <= exp < 0:
        # repr switches to exponent form below 1e-4; plain form runs down to 1e-6
        sign = "-" if mantissa.startswith("-") else ""
        digits = mantissa.lstrip("-").replace(".", "")
        return f"{sign}0.{'0' * (-exp - 1)}{digits}"
    return f"{mantissa}e{'-' if exp < 0 else '+'}{abs(exp)}"


# =============================================================================
# Binary Operations
# =============================================================================

def power(base: float, exponent: float) -> float:
    """Raise base to exponent, returning IEEE infinities/NaN instead of raising."""
    odd_exponent = float(exponent).is_integer() and exponent % 2 == 1
    # an odd exponent keeps the sign of the base, including -0
    signed_inf = -math.inf if math.copysign(1.0, base) < 0 and odd_exponent else math.inf
    try:
        return math.pow(base, exponent)
    except OverflowError:
        return signed_inf
    except ValueError:
        # math.pow rejects zero to a negative power and fractional powers of negatives
        if base == 0 and exponent < 0:
            return signed_inf
        return math.nan


def combine(a: float, b: float, op: Operator) -> float:
    """Resolve a pending operation ``a op b``."""
    if op == Operator.ADD:
        return a + b
    if op == Operator.SUBTRACT:
        return a - b
    if op == Operator.MULTIPLY:
        return a * b
    if op == Operator.DIVIDE:
        if b == 0:
            raise DivisionByZeroError("Cannot divide by zero")
        return a / b
    if op == Operator.POWER:
        return power(a, b)
    raise ValueError(f"Unknown operator: {op!r}")


# =============================================================================
# Scientific Functions
# =============================================================================

def factorial(n: float, limit: int = 170) -> float:
    """Calculate factorial of n iteratively, rejecting values above ``limit``."""
    n = float(n)
    if n < 0 or not n.is_integer():
        raise InvalidInputError("Factorial requires non-negative integer")
    if n > limit:
        raise InvalidInputError(f"Factorial input exceeds limit of {limit}")
    result = 1
    for i in range(2, int(n) + 1):
        result *= i
    try:
        return float(result)
    except OverflowError:
        raise InvalidInputError(f"Factorial of {int(n)} is too large") from None


def _trig(func, x: float) -> float:
    # math.sin(inf) raises; the display shows NaN instead
    if not math.isfinite(x):
        return math.nan
    return func(x)


def _logarithm(func, x: float) -> float:
    if math.isnan(x) or x < 0:
        return math.nan
    if x == 0:
        return -math.inf
    return func(x)


def apply_function(func: ScientificFunction, x: float, factorial_limit: int = 170) -> float:
    """Apply a unary scientific function to x."""
    if func == ScientificFunction.SIN:
        return _trig(math.sin, x)
    if func == ScientificFunction.COS:
        return _trig(math.cos, x)
    if func == ScientificFunction.TAN:
        return _trig(math.tan, x)
    if func == ScientificFunction.LOG:
        return _logarithm(math.log10, x)
    if func == ScientificFunction.LN:
        return _logarithm(math.log, x)
    if func == ScientificFunction.SQRT:
        if x < 0:
            raise InvalidInputError("Cannot calculate square root of negative number")
        return math.sqrt(x)
    if func == ScientificFunction.FACTORIAL:
        return factorial(x, factorial_limit)
    if func == ScientificFunction.RECIPROCAL:
        if x == 0:
            raise DivisionByZeroError("Cannot take reciprocal of zero")
        return 1 / x
    if func == ScientificFunction.SQUARE:
        return x * x
    if func == ScientificFunction.PI:
        return math.pi
    if func == ScientificFunction.E:
        return math.e
    raise ValueError(f"Unknown function: {func!r}")
