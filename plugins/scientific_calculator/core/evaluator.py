"""Scalar expression evaluation and function sampling.

Expressions are parsed with :mod:`ast` and walked against a whitelist of
operators and functions; nothing is ever passed to :func:`eval`.
"""

from __future__ import annotations

import ast
import math
from typing import Callable, Mapping

from common.logging import get_logger


class ExpressionError(ValueError):
    """Raised when an expression cannot be parsed or evaluated."""


class ParseError(ExpressionError):
    """Malformed syntax, unknown names or disallowed constructs."""


class MathError(ExpressionError):
    """Well formed expression whose value is undefined or not a real number."""


AngleUnit = str

_ALLOWED_ANGLE_UNITS = {"radian", "degree"}
_MAX_EXPR_LENGTH = 1024
_MAX_DEPTH = 100
_MAX_FACTORIAL = 170
DEFAULT_PRECISION = 10
DEFAULT_SAMPLES = 500
_MAX_SAMPLES = 5000

CONSTANTS: dict[str, float] = {"pi": math.pi, "e": math.e, "tau": math.tau}

logger = get_logger(__name__)


def _validate_angle_unit(angle_unit: AngleUnit) -> AngleUnit:
    if angle_unit not in _ALLOWED_ANGLE_UNITS:
        raise ParseError("angle_unit must be 'radian' or 'degree'")
    return angle_unit


def _normalize_expression(expression: str) -> str:
    if not expression or not isinstance(expression, str):
        raise ParseError("Expression is required")
    expression = expression.strip()
    if not expression:
        raise ParseError("Expression is required")
    if len(expression) > _MAX_EXPR_LENGTH:
        raise ParseError("Expression is too long")
    # Caret is exponentiation; the calculator keypad shows ÷ and ×.
    return expression.replace("÷", "/").replace("×", "*").replace("^", "**")


def format_result(value: float | int, precision: int = DEFAULT_PRECISION) -> str:
    """Render ``value`` with ``precision`` significant digits."""

    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, int):
        value = float(value)
    text = f"{value:.{precision}g}"
    return "0" if text == "-0" else text


def _canonicalize(node: ast.AST) -> str:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, int):
            return str(node.value)
        return format_result(node.value, 12)
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.UnaryOp):
        op = "+" if isinstance(node.op, ast.UAdd) else "-"
        return f"({op}{_canonicalize(node.operand)})"
    if isinstance(node, ast.BinOp):
        symbol = _BINOP_SYMBOLS[type(node.op)]
        return f"({_canonicalize(node.left)} {symbol} {_canonicalize(node.right)})"
    if isinstance(node, ast.Call):
        args = ", ".join(_canonicalize(arg) for arg in node.args)
        return f"{node.func.id}({args})"
    raise ParseError("Unsupported expression element")


_BINOP_SYMBOLS: dict[type, str] = {
    ast.Add: "+",
    ast.Sub: "-",
    ast.Mult: "*",
    ast.Div: "/",
    ast.Mod: "%",
    ast.Pow: "^",
}


def _validate_ast(node: ast.AST) -> None:
    if isinstance(node, ast.Expression):
        _validate_ast(node.body)
        return
    if isinstance(node, ast.BinOp):
        if type(node.op) not in _BINOP_SYMBOLS:
            raise ParseError("Operator not permitted")
        _validate_ast(node.left)
        _validate_ast(node.right)
        return
    if isinstance(node, ast.UnaryOp):
        if not isinstance(node.op, (ast.UAdd, ast.USub)):
            raise ParseError("Unary operator not permitted")
        _validate_ast(node.operand)
        return
    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name):
            raise ParseError("Only named functions are permitted")
        if node.keywords:
            raise ParseError("Keyword arguments are not supported")
        for arg in node.args:
            _validate_ast(arg)
        return
    if isinstance(node, ast.Name):
        return
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise ParseError("Only numeric literals are allowed")
        return
    raise ParseError("Unsupported syntax")


def _wrap_trig(fn: Callable[[float], float], *, use_degrees: bool) -> Callable[[float], float]:
    def wrapped(value: float) -> float:
        return fn(math.radians(value) if use_degrees else value)

    return wrapped


def _wrap_inverse_trig(fn: Callable[[float], float], *, use_degrees: bool) -> Callable[[float], float]:
    def wrapped(value: float) -> float:
        angle = fn(value)
        return math.degrees(angle) if use_degrees else angle

    return wrapped


def _factorial(value: float) -> float:
    if value < 0:
        raise ValueError("factorial is undefined for negative numbers")
    if value > _MAX_FACTORIAL:
        raise OverflowError("factorial result is too large")
    if float(value).is_integer():
        return float(math.factorial(int(value)))
    return math.gamma(value + 1)


def _make_function_table(angle_unit: AngleUnit) -> dict[str, Callable[..., float]]:
    use_degrees = angle_unit == "degree"
    return {
        "sin": _wrap_trig(math.sin, use_degrees=use_degrees),
        "cos": _wrap_trig(math.cos, use_degrees=use_degrees),
        "tan": _wrap_trig(math.tan, use_degrees=use_degrees),
        "asin": _wrap_inverse_trig(math.asin, use_degrees=use_degrees),
        "acos": _wrap_inverse_trig(math.acos, use_degrees=use_degrees),
        "atan": _wrap_inverse_trig(math.atan, use_degrees=use_degrees),
        "sinh": math.sinh,
        "cosh": math.cosh,
        "tanh": math.tanh,
        # log(x) is the natural logarithm, log(x, b) takes an explicit base.
        "log": lambda x, base=math.e: math.log(x, base),
        "ln": math.log,
        "log10": math.log10,
        "exp": math.exp,
        "sqrt": math.sqrt,
        "abs": abs,
        "floor": math.floor,
        "ceil": math.ceil,
        "factorial": _factorial,
        "min": min,
        "max": max,
    }


FUNCTION_NAMES: frozenset[str] = frozenset(_make_function_table("radian"))


def _apply_binop(op: ast.operator, left: float, right: float) -> float:
    if isinstance(op, ast.Add):
        return left + right
    if isinstance(op, ast.Sub):
        return left - right
    if isinstance(op, ast.Mult):
        return left * right
    if isinstance(op, ast.Div):
        return left / right
    if isinstance(op, ast.Mod):
        return left % right
    if isinstance(op, ast.Pow):
        return left**right
    raise ParseError("Operator not permitted")  # pragma: no cover - guarded by _validate_ast


def _eval_node(
    node: ast.AST,
    context: Mapping[str, float],
    functions: Mapping[str, Callable[..., float]],
) -> float:
    if isinstance(node, ast.Constant):
        value = node.value
    elif isinstance(node, ast.Name):
        if node.id not in context:
            raise ParseError(f"Unknown variable '{node.id}'")
        value = context[node.id]
    elif isinstance(node, ast.UnaryOp):
        operand = _eval_node(node.operand, context, functions)
        value = +operand if isinstance(node.op, ast.UAdd) else -operand
    elif isinstance(node, ast.BinOp):
        left = _eval_node(node.left, context, functions)
        right = _eval_node(node.right, context, functions)
        try:
            value = _apply_binop(node.op, left, right)
        except ZeroDivisionError as exc:
            raise MathError("Division by zero") from exc
        except OverflowError as exc:
            raise MathError("Result is too large") from exc
    elif isinstance(node, ast.Call):
        func = functions.get(node.func.id)
        if func is None:
            raise ParseError(f"Function '{node.func.id}' is not allowed")
        args = [_eval_node(arg, context, functions) for arg in node.args]
        try:
            value = func(*args)
        except TypeError as exc:
            raise ParseError(f"Wrong number of arguments for '{node.func.id}'") from exc
        except ZeroDivisionError as exc:
            raise MathError(f"Division by zero in '{node.func.id}'") from exc
        except (ValueError, OverflowError) as exc:
            raise MathError(f"'{node.func.id}' is undefined for the given argument") from exc
    else:  # pragma: no cover - guarded by _validate_ast
        raise ParseError("Unsupported syntax")

    if isinstance(value, complex):
        raise MathError("Complex results are not supported")
    if not isinstance(value, (int, float)):
        raise MathError("Expression returned a non-numeric value")
    try:
        value = float(value)
    except OverflowError as exc:
        raise MathError("Result is too large") from exc
    if math.isnan(value) or math.isinf(value):
        raise MathError("Result is not finite")
    return value


def _collect_names(node: ast.AST) -> set[str]:
    return {child.id for child in ast.walk(node) if isinstance(child, ast.Name)}


def _check_depth(root: ast.AST) -> None:
    # Walked iteratively; the validators and evaluator recurse per level.
    stack = [(root, 1)]
    while stack:
        node, depth = stack.pop()
        if depth > _MAX_DEPTH:
            raise ParseError("Expression is nested too deeply")
        stack.extend((child, depth + 1) for child in ast.iter_child_nodes(node))


def _parse(expression: str) -> ast.Expression:
    normalized = _normalize_expression(expression)
    try:
        parsed = ast.parse(normalized, mode="eval")
    except SyntaxError as exc:
        raise ParseError(f"Could not parse expression: {exc.msg}") from exc
    except RecursionError as exc:
        raise ParseError("Expression is nested too deeply") from exc
    _check_depth(parsed)
    _validate_ast(parsed)
    return parsed


def evaluate_expression(
    expression: str,
    *,
    angle_unit: AngleUnit = "radian",
    variables: Mapping[str, float] | None = None,
    precision: int = DEFAULT_PRECISION,
) -> dict[str, object]:
    """Evaluate a scalar expression.

    Returns the float ``result``, its ``formatted`` rendering with
    ``precision`` significant digits and a fully parenthesised ``canonical``
    form. Raises :class:`ParseError` or :class:`MathError`.
    """

    angle_unit = _validate_angle_unit(angle_unit)
    parsed = _parse(expression)
    functions = _make_function_table(angle_unit)
    context = {**CONSTANTS, **(variables or {})}
    used_names = sorted(
        name for name in _collect_names(parsed) if name not in functions and name not in CONSTANTS
    )

    result = _eval_node(parsed.body, context, functions)
    return {
        "result": result,
        "formatted": format_result(result, precision),
        "canonical": _canonicalize(parsed.body),
        "angle_unit": angle_unit,
        "used_variables": used_names,
    }


def _try_point(
    body: ast.AST, context: Mapping[str, float], functions: Mapping[str, Callable[..., float]]
) -> float | None:
    try:
        return _eval_node(body, context, functions)
    except ExpressionError:
        return None


def sample_function(
    expression: str,
    x_min: float,
    x_max: float,
    *,
    samples: int = DEFAULT_SAMPLES,
    angle_unit: AngleUnit = "radian",
) -> dict[str, object]:
    """Sample ``f(x)`` on ``samples`` equal steps from ``x_min`` to ``x_max``.

    Points where ``f`` is undefined are dropped rather than failing the
    whole series, so ``1/x`` over ``[-1, 1]`` still plots.
    """

    if not (math.isfinite(x_min) and math.isfinite(x_max)) or x_max <= x_min:
        raise ParseError("x_max must be greater than x_min")
    if samples < 1 or samples > _MAX_SAMPLES:
        raise ParseError(f"samples must be between 1 and {_MAX_SAMPLES}")

    angle_unit = _validate_angle_unit(angle_unit)
    parsed = _parse(expression)
    functions = _make_function_table(angle_unit)
    step = (x_max - x_min) / samples

    xs: list[float] = []
    ys: list[float] = []
    skipped = 0
    for i in range(samples + 1):
        x = x_min + i * step
        y = _try_point(parsed.body, {**CONSTANTS, "x": x}, functions)
        if y is None:
            skipped += 1
            continue
        xs.append(x)
        ys.append(y)
    if skipped:
        logger.debug("dropped %d undefined point(s) sampling %r", skipped, expression)
    return {
        "mode": "1d",
        "expression": _canonicalize(parsed.body),
        "angle_unit": angle_unit,
        "points": len(xs),
        "skipped": skipped,
        "x": xs,
        "y": ys,
    }


def sample_surface(
    expression: str,
    *,
    lower: float = -5.0,
    upper: float = 5.0,
    step: float = 0.2,
    angle_unit: AngleUnit = "radian",
) -> dict[str, object]:
    """Sample ``f(x, y)`` on the square grid ``[lower, upper]²``."""

    if step <= 0:
        raise ParseError("Step must be greater than zero")
    if upper < lower:
        raise ParseError("upper must be greater than or equal to lower")
    count = int(math.floor((upper - lower) / step + 1e-9)) + 1
    if count * count > _MAX_SAMPLES * 10:
        raise ParseError("Requested grid exceeds point limit")

    angle_unit = _validate_angle_unit(angle_unit)
    parsed = _parse(expression)
    functions = _make_function_table(angle_unit)
    axis = [lower + i * step for i in range(count)]

    xs: list[float] = []
    ys: list[float] = []
    zs: list[float] = []
    for x in axis:
        for y in axis:
            z = _try_point(parsed.body, {**CONSTANTS, "x": x, "y": y}, functions)
            if z is None:
                continue
            xs.append(x)
            ys.append(y)
            zs.append(z)
    return {
        "mode": "2d",
        "expression": _canonicalize(parsed.body),
        "angle_unit": angle_unit,
        "points": len(zs),
        "x": xs,
        "y": ys,
        "z": zs,
    }


__all__ = [
    "CONSTANTS",
    "DEFAULT_PRECISION",
    "ExpressionError",
    "FUNCTION_NAMES",
    "MathError",
    "ParseError",
    "evaluate_expression",
    "format_result",
    "sample_function",
    "sample_surface",
]
