"""Keyboard bindings for the calculator keypad."""

from __future__ import annotations

from .expression import DIGITS, OPERATORS, Token

FUNCTION_KEYS: dict[str, str] = {
    "s": "sin",
    "o": "cos",
    "t": "tan",
    "l": "log",
    "e": "exp",
    "r": "sqrt",
}

_COMMAND_KEYS: dict[str, Token] = {
    "Enter": Token("evaluate"),
    "=": Token("evaluate"),
    "Backspace": Token("delete"),
    "c": Token("delete"),
    "C": Token("delete"),
    "Escape": Token("clear"),
}


def _build_keymap() -> dict[str, Token]:
    keymap: dict[str, Token] = {}
    keymap.update({key: Token("digit", key) for key in DIGITS})
    keymap.update({key: Token("operator", key) for key in OPERATORS})
    keymap.update({key: Token("function", name) for key, name in FUNCTION_KEYS.items()})
    keymap.update(_COMMAND_KEYS)
    return keymap


KEYMAP: dict[str, Token] = _build_keymap()


def token_for_key(key: str) -> Token | None:
    """Return the token bound to ``key`` or ``None`` for unbound keys."""

    return KEYMAP.get(key)


__all__ = ["FUNCTION_KEYS", "KEYMAP", "token_for_key"]
