"""Keystroke driven expression builder.

The builder is always in exactly one of three states:

``Editing(text)``
    The user is typing; the display mirrors ``text`` (``"0"`` when empty).
``JustEvaluated(text)``
    ``text`` is a formatted result. The next digit starts a new expression,
    the next operator continues from the result.
``Errored()``
    The last evaluation failed. The display reads ``"Error"`` and the
    expression is empty.

Both the parser-ready expression and the display string are derived from
the state, so they cannot drift apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from common.logging import get_logger

from .evaluator import DEFAULT_PRECISION, ExpressionError, FUNCTION_NAMES, evaluate_expression
from .history import HistoryEntry, HistoryLog

logger = get_logger(__name__)

DIGITS = frozenset("0123456789.")
CONSTANT_TOKENS = frozenset({"pi", "e"})
OPERATORS = ("+", "-", "*", "/", "%", "^", "(", ")")
DISPLAY_GLYPHS = {"÷": "/", "×": "*"}
# An operator may not follow one of these (")" may, e.g. "(2+3)*4").
_TRAILING_OPERATORS = frozenset("+-*/%^(÷×")

ERROR_TEXT = "Error"
EMPTY_DISPLAY = "0"


class TokenError(ValueError):
    """Raised for a token the builder does not understand."""


@dataclass(frozen=True, slots=True)
class Editing:
    text: str = ""

    @property
    def expression_text(self) -> str:
        return self.text

    @property
    def display_text(self) -> str:
        return self.text or EMPTY_DISPLAY


@dataclass(frozen=True, slots=True)
class JustEvaluated:
    text: str

    @property
    def expression_text(self) -> str:
        return self.text

    @property
    def display_text(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class Errored:
    @property
    def expression_text(self) -> str:
        return ""

    @property
    def display_text(self) -> str:
        return ERROR_TEXT


ExpressionState = Union[Editing, JustEvaluated, Errored]


def is_fresh(state: ExpressionState) -> bool:
    """True when the next digit starts a new expression instead of appending."""

    if isinstance(state, Editing):
        return state.text == ""
    return isinstance(state, (JustEvaluated, Errored))


def substitute_glyphs(text: str) -> str:
    for glyph, syntax in DISPLAY_GLYPHS.items():
        text = text.replace(glyph, syntax)
    return text


@dataclass(frozen=True, slots=True)
class Token:
    """One discrete input event: a button press or a mapped key."""

    kind: str
    value: str = ""


TOKEN_KINDS = ("digit", "operator", "function", "delete", "clear", "evaluate")


def validate_token(token: Token) -> None:
    """Reject a token up front so a batch is applied all-or-nothing."""

    if token.kind not in TOKEN_KINDS:
        raise TokenError(f"Unknown token kind '{token.kind}'")
    if token.kind == "digit" and token.value not in DIGITS and token.value not in CONSTANT_TOKENS:
        raise TokenError(f"'{token.value}' is not a digit")
    if token.kind == "operator" and token.value not in OPERATORS and token.value not in DISPLAY_GLYPHS:
        raise TokenError(f"'{token.value}' is not an operator")
    if token.kind == "function" and token.value not in FUNCTION_NAMES:
        raise TokenError(f"Unknown function '{token.value}'")


class Calculator:
    """Expression builder plus the history it feeds.

    ``evaluator`` must accept an expression string and return a mapping
    with a ``formatted`` entry, raising :class:`ExpressionError` on failure.
    """

    def __init__(
        self,
        history: HistoryLog | None = None,
        *,
        precision: int = DEFAULT_PRECISION,
        angle_unit: str = "radian",
        evaluator: Callable[..., dict] = evaluate_expression,
    ) -> None:
        self.history = history if history is not None else HistoryLog()
        self.precision = precision
        self.angle_unit = angle_unit
        self._evaluator = evaluator
        self.state: ExpressionState = Editing()

    @property
    def expression_text(self) -> str:
        return self.state.expression_text

    @property
    def display_text(self) -> str:
        return self.state.display_text

    # ---- Transitions -----------------------------------------------------
    def input_digit(self, digit: str) -> None:
        if digit not in DIGITS and digit not in CONSTANT_TOKENS:
            raise TokenError(f"'{digit}' is not a digit")
        if is_fresh(self.state):
            self.state = Editing(digit)
        else:
            self.state = Editing(self.state.expression_text + digit)

    def input_operator(self, op: str) -> None:
        if op not in OPERATORS and op not in DISPLAY_GLYPHS:
            raise TokenError(f"'{op}' is not an operator")
        state = self.state
        if isinstance(state, JustEvaluated):
            self.state = Editing(state.display_text + op)
            return
        text = state.expression_text
        if not text or text[-1] in _TRAILING_OPERATORS:
            return
        self.state = Editing(text + op)

    def insert_function(self, name: str) -> None:
        if name not in FUNCTION_NAMES:
            raise TokenError(f"Unknown function '{name}'")
        self.state = Editing(self.state.expression_text + f"{name}(")

    def delete(self) -> None:
        self.state = Editing(self.state.expression_text[:-1])

    def clear(self) -> None:
        self.state = Editing()

    def evaluate(self) -> bool:
        """Evaluate the current expression; return ``True`` on success."""

        source = self.state.expression_text or self.state.display_text
        if not source.strip():
            return False
        try:
            outcome = self._evaluator(
                substitute_glyphs(source), angle_unit=self.angle_unit, precision=self.precision
            )
        except ExpressionError as exc:
            logger.debug("evaluation of %r failed: %s", source, exc)
            self.state = Errored()
            return False
        formatted = str(outcome["formatted"])
        self.history.record(HistoryEntry(expression=source, result=formatted))
        self.state = JustEvaluated(formatted)
        return True

    def recall(self, index: int) -> HistoryEntry:
        """Continue from a past result without touching the log."""

        entry = self.history.get(index)
        self.state = JustEvaluated(entry.result)
        return entry

    # ---- Dispatch --------------------------------------------------------
    def apply(self, token: Token) -> None:
        if token.kind == "digit":
            self.input_digit(token.value)
        elif token.kind == "operator":
            self.input_operator(token.value)
        elif token.kind == "function":
            self.insert_function(token.value)
        elif token.kind == "delete":
            self.delete()
        elif token.kind == "clear":
            self.clear()
        elif token.kind == "evaluate":
            self.evaluate()
        else:
            raise TokenError(f"Unknown token kind '{token.kind}'")

    def snapshot(self) -> dict[str, object]:
        state = self.state
        if isinstance(state, Editing):
            kind = "editing"
        elif isinstance(state, JustEvaluated):
            kind = "just_evaluated"
        else:
            kind = "error"
        return {
            "state": kind,
            "expression": state.expression_text,
            "display": state.display_text,
            "angle_unit": self.angle_unit,
            "history_size": len(self.history),
        }


__all__ = [
    "Calculator",
    "CONSTANT_TOKENS",
    "DIGITS",
    "Editing",
    "Errored",
    "ExpressionState",
    "JustEvaluated",
    "OPERATORS",
    "Token",
    "TOKEN_KINDS",
    "TokenError",
    "is_fresh",
    "substitute_glyphs",
    "validate_token",
]
