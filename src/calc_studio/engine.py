"""
Calculator engine.

The engine is a pure reducer: every operation takes a ``CalculatorState``
and returns a new one, never mutating its input. ``reduce`` dispatches a
decoded ``InputToken`` to the matching operation and ``replay`` folds a
sequence of tokens. ``Calculator`` holds the current state for the single
input context that owns it.

Binary operators chain left to right without precedence: pressing an
operator while another is pending resolves the pending one first, so
``3 + 4 * 2 =`` is 14. Scientific functions apply immediately to the display
and leave a pending operation in place, so ``3 + 16 sqrt =`` is 7.

Arithmetic failures put the engine into error mode: the display shows the
error sentinel, the pending operation is dropped and no history entry is
written. Digit or decimal-point entry, ``clear`` and ``all_clear`` leave
error mode; operators, functions, recall and memory reads are ignored
while in it.
"""

from collections.abc import Iterable

import structlog

from calc_studio import numbers
from calc_studio.exceptions import CalculatorError, TokenError
from calc_studio.models import (
    CalculatorState,
    EngineConfig,
    HistoryEntry,
    InputToken,
    MemoryCommand,
    Operator,
    ScientificFunction,
    Snapshot,
    TokenKind,
)
from calc_studio.numbers import format_number, parse_display
from calc_studio.tokens import decode_token

logger = structlog.get_logger()

DEFAULT_CONFIG = EngineConfig()

DIGITS = frozenset("0123456789")


# =============================================================================
# Helpers
# =============================================================================

def _enter_error(state: CalculatorState, config: EngineConfig, error: CalculatorError) -> CalculatorState:
    logger.debug("Entered error mode", error=str(error), kind=type(error).__name__)
    return state.model_copy(update={
        "display": config.error_sentinel,
        "is_error": True,
        "pending_operand": None,
        "pending_operator": None,
        "awaiting_new_entry": False,
    })


def _record(
    history: tuple[HistoryEntry, ...],
    entry: HistoryEntry,
    capacity: int,
) -> tuple[HistoryEntry, ...]:
    """Prepend entry, evicting the oldest entries beyond capacity."""
    return (entry,) + history[:capacity - 1]


def _resolve_pending(state: CalculatorState, current: float) -> tuple[float, HistoryEntry]:
    """Combine the pending operand with current and describe it as a history entry."""
    result = numbers.combine(state.pending_operand, current, state.pending_operator)
    entry = HistoryEntry(
        expression=f"{format_number(state.pending_operand)} {state.pending_operator.value} {format_number(current)}",
        result=format_number(result),
    )
    return result, entry


# =============================================================================
# Entry
# =============================================================================

def enter_digit(state: CalculatorState, digit: str, config: EngineConfig = DEFAULT_CONFIG) -> CalculatorState:
    """Append a digit to the display, or start a fresh entry with it."""
    if digit not in DIGITS:
        raise TokenError(f"Not a digit: {digit!r}")

    if state.is_error or state.awaiting_new_entry:
        display = digit
    elif state.display == "0":
        display = digit
    else:
        display = state.display + digit

    return state.model_copy(update={
        "display": display,
        "is_error": False,
        "awaiting_new_entry": False,
    })


def enter_decimal_point(state: CalculatorState, config: EngineConfig = DEFAULT_CONFIG) -> CalculatorState:
    """Start or extend a fractional entry; a second point is ignored."""
    if state.is_error or state.awaiting_new_entry:
        return state.model_copy(update={
            "display": "0.",
            "is_error": False,
            "awaiting_new_entry": False,
        })
    if "." in state.display:
        return state
    return state.model_copy(update={"display": state.display + "."})


def backspace(state: CalculatorState, config: EngineConfig = DEFAULT_CONFIG) -> CalculatorState:
    """Drop the last display character, falling back to "0"."""
    if state.is_error:
        return state
    display = state.display[:-1]
    if display in ("", "-", "+"):
        display = "0"
    return state.model_copy(update={"display": display})


# =============================================================================
# Binary Operations
# =============================================================================

def apply_operator(
    state: CalculatorState,
    op: Operator,
    config: EngineConfig = DEFAULT_CONFIG,
) -> CalculatorState:
    """Start a pending operation, resolving the previous one first if any."""
    if state.is_error:
        return state

    current = parse_display(state.display)
    if not state.has_pending:
        return state.model_copy(update={
            "pending_operand": current,
            "pending_operator": op,
            "awaiting_new_entry": True,
        })

    try:
        result, entry = _resolve_pending(state, current)
    except CalculatorError as e:
        return _enter_error(state, config, e)

    return state.model_copy(update={
        "display": entry.result,
        "history": _record(state.history, entry, config.history_capacity),
        "pending_operand": result,
        "pending_operator": op,
        "awaiting_new_entry": True,
    })


def equals(state: CalculatorState, config: EngineConfig = DEFAULT_CONFIG) -> CalculatorState:
    """Resolve the pending operation; a no-op when nothing is pending."""
    if state.is_error or not state.has_pending:
        return state

    current = parse_display(state.display)
    try:
        _, entry = _resolve_pending(state, current)
    except CalculatorError as e:
        return _enter_error(state, config, e)

    return state.model_copy(update={
        "display": entry.result,
        "history": _record(state.history, entry, config.history_capacity),
        "pending_operand": None,
        "pending_operator": None,
        "awaiting_new_entry": True,
    })


# =============================================================================
# Scientific Functions
# =============================================================================

def apply_function(
    state: CalculatorState,
    func: ScientificFunction,
    config: EngineConfig = DEFAULT_CONFIG,
) -> CalculatorState:
    """Apply a unary function to the display, keeping any pending operation."""
    if state.is_error:
        return state

    x = parse_display(state.display)
    try:
        result = numbers.apply_function(func, x, config.factorial_limit)
    except CalculatorError as e:
        return _enter_error(state, config, e)

    entry = HistoryEntry(expression=f"{func.value}({format_number(x)})", result=format_number(result))
    return state.model_copy(update={
        "display": entry.result,
        "history": _record(state.history, entry, config.history_capacity),
        "awaiting_new_entry": True,
    })


# =============================================================================
# Memory
# =============================================================================

def memory(
    state: CalculatorState,
    command: MemoryCommand,
    config: EngineConfig = DEFAULT_CONFIG,
) -> CalculatorState:
    """Run a memory register command."""
    if command == MemoryCommand.CLEAR:
        return state.model_copy(update={"memory": 0.0})
    if state.is_error:
        return state

    if command == MemoryCommand.RECALL:
        return state.model_copy(update={
            "display": format_number(state.memory),
            "awaiting_new_entry": True,
        })

    current = parse_display(state.display)
    if command == MemoryCommand.STORE:
        value = current
    elif command == MemoryCommand.ADD:
        value = state.memory + current
    else:
        value = state.memory - current
    return state.model_copy(update={"memory": value})


# =============================================================================
# Reset and History
# =============================================================================

def clear(state: CalculatorState, config: EngineConfig = DEFAULT_CONFIG) -> CalculatorState:
    """Soft reset: keeps memory and history."""
    return CalculatorState(memory=state.memory, history=state.history)


def all_clear(state: CalculatorState, config: EngineConfig = DEFAULT_CONFIG) -> CalculatorState:
    """Hard reset."""
    return CalculatorState()


def clear_history(state: CalculatorState, config: EngineConfig = DEFAULT_CONFIG) -> CalculatorState:
    return state.model_copy(update={"history": ()})


def recall_history_entry(
    state: CalculatorState,
    entry: HistoryEntry,
    config: EngineConfig = DEFAULT_CONFIG,
) -> CalculatorState:
    """Put a history entry's result on the display."""
    if state.is_error:
        return state
    return state.model_copy(update={
        "display": entry.result,
        "awaiting_new_entry": True,
    })


# =============================================================================
# Dispatch
# =============================================================================

def _coerce(enum_cls, token: InputToken):
    try:
        return enum_cls(token.value)
    except ValueError:
        raise TokenError(f"Invalid {token.kind.value} value: {token.value!r}")


def reduce(
    state: CalculatorState,
    token: InputToken,
    config: EngineConfig = DEFAULT_CONFIG,
) -> CalculatorState:
    """Apply one input token and return the resulting state."""
    kind = token.kind

    if kind == TokenKind.DIGIT:
        return enter_digit(state, token.value or "", config)
    if kind == TokenKind.DECIMAL_POINT:
        return enter_decimal_point(state, config)
    if kind == TokenKind.BACKSPACE:
        return backspace(state, config)
    if kind == TokenKind.OPERATOR:
        return apply_operator(state, _coerce(Operator, token), config)
    if kind == TokenKind.EQUALS:
        return equals(state, config)
    if kind == TokenKind.FUNCTION:
        return apply_function(state, _coerce(ScientificFunction, token), config)
    if kind == TokenKind.MEMORY:
        return memory(state, _coerce(MemoryCommand, token), config)
    if kind == TokenKind.CLEAR:
        return clear(state, config)
    if kind == TokenKind.ALL_CLEAR:
        return all_clear(state, config)
    if kind == TokenKind.CLEAR_HISTORY:
        return clear_history(state, config)
    if kind == TokenKind.RECALL_HISTORY:
        if token.index is None or token.index >= len(state.history):
            raise TokenError(f"No history entry at index {token.index}")
        return recall_history_entry(state, state.history[token.index], config)

    raise TokenError(f"Unsupported token kind: {kind!r}")


def replay(
    tokens: Iterable[InputToken],
    state: CalculatorState | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> CalculatorState:
    """Fold a sequence of tokens into a state, starting from a fresh one by default."""
    state = state or CalculatorState()
    for token in tokens:
        state = reduce(state, token, config)
    return state


def snapshot(state: CalculatorState) -> Snapshot:
    """Build the read-only view renderers poll after each operation."""
    pending_expression = None
    if state.has_pending:
        pending_expression = f"{format_number(state.pending_operand)} {state.pending_operator.value}"

    return Snapshot(
        display=state.display,
        is_error=state.is_error,
        awaiting_new_entry=state.awaiting_new_entry,
        has_pending=state.has_pending,
        pending_operand=state.pending_operand,
        pending_operator=state.pending_operator,
        pending_expression=pending_expression,
        memory=state.memory,
        memory_display=format_number(state.memory),
        has_memory=state.memory != 0,
        history=list(state.history),
    )


# =============================================================================
# Stateful Wrapper
# =============================================================================

class Calculator:
    """
    Holds the current state for one input context.

    Every method applies exactly one reducer operation. ``press`` accepts a
    decoded token or a key name, which is decoded with
    ``calc_studio.tokens.decode_token``.
    """

    def __init__(self, config: EngineConfig | None = None, state: CalculatorState | None = None):
        self.config = config or EngineConfig.from_settings()
        self._state = state or CalculatorState()

    @property
    def state(self) -> CalculatorState:
        return self._state

    @property
    def display(self) -> str:
        return self._state.display

    def snapshot(self) -> Snapshot:
        return snapshot(self._state)

    def press(self, token: InputToken | str) -> Snapshot:
        """Apply one token or key name."""
        self._state = reduce(self._state, self._decode(token), self.config)
        return self.snapshot()

    def press_many(self, tokens: Iterable[InputToken | str]) -> Snapshot:
        """
        Apply several tokens as one step.

        If any token fails to decode or resolve, ``TokenError`` propagates and
        the state is left as it was before the call.
        """
        decoded = [self._decode(t) for t in tokens]
        self._state = replay(decoded, self._state, self.config)
        return self.snapshot()

    def enter_digit(self, digit: str) -> None:
        self._state = enter_digit(self._state, digit, self.config)

    def enter_decimal_point(self) -> None:
        self._state = enter_decimal_point(self._state, self.config)

    def backspace(self) -> None:
        self._state = backspace(self._state, self.config)

    def apply_operator(self, op: Operator | str) -> None:
        self._state = apply_operator(self._state, Operator(op), self.config)

    def equals(self) -> None:
        self._state = equals(self._state, self.config)

    def apply_function(self, func: ScientificFunction | str) -> None:
        self._state = apply_function(self._state, ScientificFunction(func), self.config)

    def memory(self, command: MemoryCommand | str) -> None:
        self._state = memory(self._state, MemoryCommand(command), self.config)

    def clear(self) -> None:
        self._state = clear(self._state, self.config)

    def all_clear(self) -> None:
        self._state = all_clear(self._state, self.config)

    def clear_history(self) -> None:
        self._state = clear_history(self._state, self.config)

    def recall_history_entry(self, entry: HistoryEntry | int) -> None:
        """Recall an entry, given directly or by its index (0 is newest)."""
        if isinstance(entry, int):
            if entry < 0:
                raise TokenError(f"No history entry at index {entry}")
            self._state = reduce(
                self._state,
                InputToken(kind=TokenKind.RECALL_HISTORY, index=entry),
                self.config,
            )
        else:
            self._state = recall_history_entry(self._state, entry, self.config)

    @staticmethod
    def _decode(token: InputToken | str) -> InputToken:
        if isinstance(token, InputToken):
            return token
        return decode_token(token)
