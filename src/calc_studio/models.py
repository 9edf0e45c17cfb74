"""
Core data models for Calc Studio.

Defines the canonical schemas for the calculator state, decoded input
tokens, history entries and the read-only snapshot handed to renderers.
"""

import math
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from calc_studio.config import Settings, settings


# =============================================================================
# Enums
# =============================================================================

class Operator(str, Enum):
    """Binary operators that can be left pending."""
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    POWER = "^"


class ScientificFunction(str, Enum):
    """Unary functions; the value is the symbol used in history expressions."""
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    LOG = "log"
    LN = "ln"
    SQRT = "sqrt"
    FACTORIAL = "!"
    RECIPROCAL = "1/x"
    SQUARE = "x²"
    PI = "π"
    E = "e"


class MemoryCommand(str, Enum):
    """Memory register commands."""
    CLEAR = "MC"
    RECALL = "MR"
    STORE = "MS"
    ADD = "M+"
    SUBTRACT = "M-"


class TokenKind(str, Enum):
    """Kinds of logical input token the engine consumes."""
    DIGIT = "digit"
    DECIMAL_POINT = "decimal_point"
    BACKSPACE = "backspace"
    OPERATOR = "operator"
    EQUALS = "equals"
    FUNCTION = "function"
    MEMORY = "memory"
    CLEAR = "clear"
    ALL_CLEAR = "all_clear"
    CLEAR_HISTORY = "clear_history"
    RECALL_HISTORY = "recall_history"


# =============================================================================
# Engine Models
# =============================================================================

class EngineConfig(BaseModel):
    """Knobs the reducer needs; everything else about the engine is fixed."""
    model_config = ConfigDict(frozen=True)

    history_capacity: int = Field(10, ge=1)
    factorial_limit: int = Field(170, ge=1)
    error_sentinel: str = Field("Error", min_length=1)

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "EngineConfig":
        """Build an engine config from application settings."""
        source = source or settings
        return cls(
            history_capacity=source.history_capacity,
            factorial_limit=source.factorial_limit,
            error_sentinel=source.error_sentinel,
        )


class HistoryEntry(BaseModel):
    """One completed calculation: its expression text and result text."""
    model_config = ConfigDict(frozen=True)

    expression: str
    result: str


class CalculatorState(BaseModel):
    """
    Complete calculator state.

    Instances are immutable; every engine operation returns a new state.
    ``history`` is ordered newest first.
    """
    model_config = ConfigDict(frozen=True)

    display: str = Field("0", min_length=1)
    pending_operand: float | None = None
    pending_operator: Operator | None = None
    awaiting_new_entry: bool = False
    is_error: bool = False
    memory: float = 0.0
    history: tuple[HistoryEntry, ...] = ()

    @model_validator(mode="after")
    def check_pending_pair(self) -> "CalculatorState":
        if (self.pending_operand is None) != (self.pending_operator is None):
            raise ValueError("pending_operand and pending_operator must be set together")
        return self

    @property
    def has_pending(self) -> bool:
        return self.pending_operator is not None


class InputToken(BaseModel):
    """
    A decoded logical input event.

    ``value`` carries the digit, operator symbol, function symbol or memory
    command; ``index`` addresses a history entry for ``RECALL_HISTORY``.
    """
    model_config = ConfigDict(frozen=True)

    kind: TokenKind
    value: str | None = None
    index: int | None = Field(None, ge=0)

    def __str__(self) -> str:
        if self.kind == TokenKind.RECALL_HISTORY:
            return f"recall:{self.index}"
        return self.value if self.value is not None else self.kind.value


class Snapshot(BaseModel):
    """Read-only view of the calculator handed to renderers."""
    display: str
    is_error: bool
    awaiting_new_entry: bool
    has_pending: bool
    pending_operand: float | None = None
    pending_operator: Operator | None = None
    pending_expression: str | None = None
    memory: float
    memory_display: str
    has_memory: bool
    history: list[HistoryEntry] = Field(default_factory=list)

    @field_serializer("pending_operand", "memory", when_used="json")
    def serialize_finite(self, value: float | None) -> float | None:
        # JSON has no NaN or Infinity; memory_display still carries them
        if value is None or not math.isfinite(value):
            return None
        return value


# =============================================================================
# API Models
# =============================================================================

class InputRequest(BaseModel):
    """Request model for feeding key names into a session."""
    tokens: list[str] = Field(..., min_length=1, description="Key names, e.g. ['3', '+', '4', '=']")


class SessionSnapshot(Snapshot):
    """Snapshot of a calculator owned by an API session."""
    session_id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
