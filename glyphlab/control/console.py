"""
GlyphLab Parameter Console.
==========================

Lets a user script the parameter vector, e.g.

    noise = noise + 0.1
    stroke = (stroke + texture) / 2; texture -= 0.05

Only a tiny arithmetic grammar is accepted. The script is parsed with `ast`
and every node is checked against a whitelist before anything runs:

- statements: `name = expr`, `name op= expr`
- names: stroke, noise, texture
- numbers, parentheses, unary + and -, binary + - * / %
- at most CONSOLE_MAX_EXPR_DEPTH levels of operator nesting

Calls, attributes, subscripts, power, comparisons and unknown names are
rejected with ConsoleError. Nothing is ever handed to eval/exec.
"""
import ast
import math
import operator
from typing import Dict, List, Optional, Tuple

from glyphlab.config import CONFIG
from glyphlab.core.errors import ConsoleError
from glyphlab.core.types import ParameterVector, clamp_unit

PARAMETER_NAMES = ("stroke", "noise", "texture")

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Mod: operator.mod,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def _check_expr(node: ast.AST, depth: int = 0) -> None:
    if depth > CONFIG["CONSOLE_MAX_EXPR_DEPTH"]:
        raise ConsoleError("Expression nested too deeply")
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise ConsoleError(f"Only numeric literals are allowed, got {node.value!r}")
    elif isinstance(node, ast.Name):
        if node.id not in PARAMETER_NAMES:
            raise ConsoleError(f"Unknown name '{node.id}' (use {', '.join(PARAMETER_NAMES)})")
    elif isinstance(node, ast.BinOp):
        if type(node.op) not in _BINARY_OPS:
            raise ConsoleError(f"Operator {type(node.op).__name__} is not allowed")
        _check_expr(node.left, depth + 1)
        _check_expr(node.right, depth + 1)
    elif isinstance(node, ast.UnaryOp):
        if type(node.op) not in _UNARY_OPS:
            raise ConsoleError(f"Operator {type(node.op).__name__} is not allowed")
        _check_expr(node.operand, depth + 1)
    else:
        raise ConsoleError(f"{type(node).__name__} is not allowed in console scripts")


def _eval_expr(node: ast.AST, env: Dict[str, float]) -> float:
    if isinstance(node, ast.Constant):
        try:
            return float(node.value)
        except OverflowError as exc:
            raise ConsoleError("Numeric literal out of range") from exc
    if isinstance(node, ast.Name):
        return env[node.id]
    if isinstance(node, ast.BinOp):
        try:
            return _BINARY_OPS[type(node.op)](_eval_expr(node.left, env), _eval_expr(node.right, env))
        except ZeroDivisionError as exc:
            raise ConsoleError("Division by zero") from exc
    return _UNARY_OPS[type(node.op)](_eval_expr(node.operand, env))


def compile_script(script: str) -> List[Tuple[str, Optional[type], ast.AST]]:
    """
    Parses and vets a script.

    Returns:
        [(target, augmented_op_or_None, expression)] in source order.
    """
    if len(script) > CONFIG["CONSOLE_MAX_SCRIPT_CHARS"]:
        raise ConsoleError("Script too long")
    try:
        tree = ast.parse(script, mode="exec")
    except (SyntaxError, ValueError, RecursionError) as exc:
        raise ConsoleError(f"Syntax error: {exc}") from exc

    program = []
    for stmt in tree.body:
        if isinstance(stmt, ast.Assign):
            if len(stmt.targets) != 1 or not isinstance(stmt.targets[0], ast.Name):
                raise ConsoleError("Assign to exactly one parameter per statement")
            target, op = stmt.targets[0].id, None
        elif isinstance(stmt, ast.AugAssign):
            if not isinstance(stmt.target, ast.Name) or type(stmt.op) not in _BINARY_OPS:
                raise ConsoleError("Unsupported augmented assignment")
            target, op = stmt.target.id, type(stmt.op)
        else:
            raise ConsoleError(f"{type(stmt).__name__} statements are not allowed")

        if target not in PARAMETER_NAMES:
            raise ConsoleError(f"Unknown parameter '{target}'")
        _check_expr(stmt.value)
        program.append((target, op, stmt.value))
    return program


class ParameterConsole:
    def __init__(self, script: str = ""):
        self.script = script
        self._program = compile_script(script)

    def run(self, params: ParameterVector) -> ParameterVector:
        """
        Evaluates the script against `params`.
        Each assignment is clamped to [0, 1] before later statements see it.
        """
        env = params.as_dict()
        for target, op, expr in self._program:
            value = _eval_expr(expr, env)
            if op is not None:
                try:
                    value = _BINARY_OPS[op](env[target], value)
                except ZeroDivisionError as exc:
                    raise ConsoleError("Division by zero") from exc
            if not math.isfinite(value):
                raise ConsoleError(f"'{target}' evaluated to {value}")
            env[target] = clamp_unit(value, env[target])
        return ParameterVector(**env).clamped()
