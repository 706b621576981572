"""Exports for scientific calculator core."""

from .evaluator import (
    DEFAULT_PRECISION,
    ExpressionError,
    FUNCTION_NAMES,
    MathError,
    ParseError,
    evaluate_expression,
    format_result,
    sample_function,
    sample_surface,
)
from .expression import (
    Calculator,
    Editing,
    Errored,
    JustEvaluated,
    Token,
    TOKEN_KINDS,
    TokenError,
    validate_token,
)
from .history import DEFAULT_HISTORY_LIMIT, HistoryEntry, HistoryIndexError, HistoryLog
from .keymap import KEYMAP, token_for_key

__all__ = [
    "Calculator",
    "DEFAULT_HISTORY_LIMIT",
    "DEFAULT_PRECISION",
    "Editing",
    "Errored",
    "ExpressionError",
    "FUNCTION_NAMES",
    "HistoryEntry",
    "HistoryIndexError",
    "HistoryLog",
    "JustEvaluated",
    "KEYMAP",
    "MathError",
    "ParseError",
    "Token",
    "TOKEN_KINDS",
    "TokenError",
    "evaluate_expression",
    "format_result",
    "sample_function",
    "sample_surface",
    "token_for_key",
    "validate_token",
]
