"""
Key name decoding.

Maps the textual names of calculator keys (button labels, keyboard key
names, and a few spelled-out aliases) onto the logical ``InputToken`` values
the engine consumes. Lookups are case-insensitive.
"""

import re

from calc_studio.exceptions import TokenError
from calc_studio.models import InputToken, MemoryCommand, Operator, ScientificFunction, TokenKind

_RECALL_PATTERN = re.compile(r"^(?:recall:|h)(\d+)$")


def _op(op: Operator) -> InputToken:
    return InputToken(kind=TokenKind.OPERATOR, value=op.value)


def _fn(func: ScientificFunction) -> InputToken:
    return InputToken(kind=TokenKind.FUNCTION, value=func.value)


def _mem(command: MemoryCommand) -> InputToken:
    return InputToken(kind=TokenKind.MEMORY, value=command.value)


# Groups of (description, token, accepted names); the first name is the canonical one.
KEY_GROUPS: list[tuple[str, InputToken, tuple[str, ...]]] = [
    ("Decimal point", InputToken(kind=TokenKind.DECIMAL_POINT), (".", ",")),
    ("Add", _op(Operator.ADD), ("+", "plus")),
    ("Subtract", _op(Operator.SUBTRACT), ("-", "−", "minus")),
    ("Multiply", _op(Operator.MULTIPLY), ("*", "×", "x", "times")),
    ("Divide", _op(Operator.DIVIDE), ("/", "÷", "div")),
    ("Power", _op(Operator.POWER), ("^", "x^y", "xʸ", "pow")),
    ("Equals", InputToken(kind=TokenKind.EQUALS), ("=", "enter")),
    ("Sine", _fn(ScientificFunction.SIN), ("sin",)),
    ("Cosine", _fn(ScientificFunction.COS), ("cos",)),
    ("Tangent", _fn(ScientificFunction.TAN), ("tan",)),
    ("Base-10 logarithm", _fn(ScientificFunction.LOG), ("log",)),
    ("Natural logarithm", _fn(ScientificFunction.LN), ("ln",)),
    ("Square root", _fn(ScientificFunction.SQRT), ("sqrt", "√", "√x")),
    ("Factorial", _fn(ScientificFunction.FACTORIAL), ("!", "x!", "fact", "factorial")),
    ("Reciprocal", _fn(ScientificFunction.RECIPROCAL), ("1/x", "recip", "reciprocal")),
    ("Square", _fn(ScientificFunction.SQUARE), ("x²", "x^2", "sq", "square")),
    ("Pi", _fn(ScientificFunction.PI), ("π", "pi")),
    ("Euler's number", _fn(ScientificFunction.E), ("e",)),
    ("Memory clear", _mem(MemoryCommand.CLEAR), ("MC",)),
    ("Memory recall", _mem(MemoryCommand.RECALL), ("MR",)),
    ("Memory store", _mem(MemoryCommand.STORE), ("MS",)),
    ("Memory add", _mem(MemoryCommand.ADD), ("M+",)),
    ("Memory subtract", _mem(MemoryCommand.SUBTRACT), ("M-", "M−")),
    ("Clear", InputToken(kind=TokenKind.CLEAR), ("C", "clear", "escape", "esc")),
    ("All clear", InputToken(kind=TokenKind.ALL_CLEAR), ("AC", "allclear", "all_clear")),
    ("Backspace", InputToken(kind=TokenKind.BACKSPACE), ("⌫", "backspace", "back", "bs")),
    ("Clear history", InputToken(kind=TokenKind.CLEAR_HISTORY), ("clearhistory", "clear_history")),
]

_ALIASES: dict[str, InputToken] = {
    name.lower(): token
    for _, token, names in KEY_GROUPS
    for name in names
}


def decode_token(text: str) -> InputToken:
    """
    Decode one key name into an input token.

    Digits decode to themselves; ``recall:<n>`` and ``h<n>`` recall history
    entry n (0 is newest). Raises ``TokenError`` for anything else unknown.
    """
    key = text.strip()
    if len(key) == 1 and key in "0123456789":
        return InputToken(kind=TokenKind.DIGIT, value=key)

    lowered = key.lower()
    token = _ALIASES.get(lowered)
    if token is not None:
        return token

    match = _RECALL_PATTERN.match(lowered)
    if match:
        return InputToken(kind=TokenKind.RECALL_HISTORY, index=int(match.group(1)))

    raise TokenError(f"Unknown key: {text!r}")


def decode_tokens(text: str) -> list[InputToken]:
    """Decode a whitespace-separated line of key names."""
    return [decode_token(part) for part in text.split()]
