"""
Tests for key name decoding.
"""

import pytest

from calc_studio.exceptions import TokenError
from calc_studio.models import InputToken, TokenKind
from calc_studio.tokens import KEY_GROUPS, decode_token, decode_tokens


class TestDecodeToken:
    """Test single key names."""

    def test_digit(self):
        assert decode_token("7") == InputToken(kind=TokenKind.DIGIT, value="7")

    def test_decimal_point(self):
        assert decode_token(".").kind == TokenKind.DECIMAL_POINT

    @pytest.mark.parametrize("name,symbol", [
        ("+", "+"),
        ("−", "-"),
        ("×", "*"),
        ("÷", "/"),
        ("x^y", "^"),
    ])
    def test_operator_labels(self, name, symbol):
        assert decode_token(name) == InputToken(kind=TokenKind.OPERATOR, value=symbol)

    def test_keyboard_names(self):
        assert decode_token("Enter").kind == TokenKind.EQUALS
        assert decode_token("Escape").kind == TokenKind.CLEAR
        assert decode_token("Backspace").kind == TokenKind.BACKSPACE

    def test_function_aliases(self):
        assert decode_token("x!").value == "!"
        assert decode_token("factorial").value == "!"
        assert decode_token("pi").value == "π"
        assert decode_token("√").value == "sqrt"

    def test_memory_is_case_insensitive(self):
        assert decode_token("m+") == InputToken(kind=TokenKind.MEMORY, value="M+")

    def test_clear_and_all_clear(self):
        assert decode_token("C").kind == TokenKind.CLEAR
        assert decode_token("AC").kind == TokenKind.ALL_CLEAR

    def test_recall(self):
        assert decode_token("recall:3") == InputToken(kind=TokenKind.RECALL_HISTORY, index=3)
        assert decode_token("h0").index == 0

    def test_surrounding_whitespace(self):
        assert decode_token(" 4 ").value == "4"

    @pytest.mark.parametrize("name", ["", "foo", "12", "recall:", "h-1"])
    def test_unknown_raises_error(self, name):
        with pytest.raises(TokenError):
            decode_token(name)


class TestDecodeTokens:
    """Test decoding whole lines."""

    def test_split_on_whitespace(self):
        tokens = decode_tokens("3 +  4\t=")
        assert [t.kind for t in tokens] == [
            TokenKind.DIGIT,
            TokenKind.OPERATOR,
            TokenKind.DIGIT,
            TokenKind.EQUALS,
        ]

    def test_empty_line(self):
        assert decode_tokens("   ") == []

    def test_names_are_unique(self):
        names = [name.lower() for _, _, group in KEY_GROUPS for name in group]
        assert len(names) == len(set(names))
