"""Stack-machine program loader — line-oriented or JSON text to IR instructions."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from .ir import Opcode, SMInstruction
from . import constants

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")

_OPERAND_ARITY: dict[Opcode, int] = {
    Opcode.READ: 0,
    Opcode.WRITE: 0,
    Opcode.CONST: 1,
    Opcode.LD: 1,
    Opcode.ST: 1,
    Opcode.BINOP: 1,
}


class IRParsingError(Exception):
    """Raised when program text cannot be parsed into valid IR."""

    pass


def _parse_opcode(raw: Any, where: str) -> Opcode:
    try:
        return Opcode(str(raw).upper())
    except ValueError as exc:
        raise IRParsingError(f"{where}: unknown opcode {raw!r}") from exc


def _parse_integer(raw: Any, where: str) -> int:
    """Accept an int (not bool) or an integer literal string within 32 bits."""
    if isinstance(raw, bool) or not isinstance(raw, (int, str)):
        raise IRParsingError(f"{where}: CONST expects an integer, got {raw!r}")
    try:
        value = int(raw)
    except ValueError as exc:
        raise IRParsingError(f"{where}: CONST expects an integer, got {raw!r}") from exc
    if not constants.IMMEDIATE_MIN <= value <= constants.IMMEDIATE_MAX:
        raise IRParsingError(f"{where}: CONST {value} does not fit in 32 bits")
    return value


def _coerce_operands(opcode: Opcode, operands: list[Any], where: str) -> list[Any]:
    """Check operand count and types for *opcode*."""
    expected = _OPERAND_ARITY[opcode]
    if len(operands) != expected:
        raise IRParsingError(
            f"{where}: {opcode.value} takes {expected} operand(s), got {len(operands)}"
        )
    if opcode == Opcode.CONST:
        return [_parse_integer(operands[0], where)]
    if opcode in (Opcode.LD, Opcode.ST):
        name = str(operands[0])
        if not _NAME_PATTERN.match(name):
            raise IRParsingError(f"{where}: invalid variable name {name!r}")
        return [name]
    # BINOP operators are checked by the code generator
    return [str(op) for op in operands]


def _parse_line(line: str, lineno: int) -> SMInstruction:
    where = f"line {lineno}"
    head, *operands = line.split()
    opcode = _parse_opcode(head, where)
    return SMInstruction(
        opcode=opcode, operands=_coerce_operands(opcode, operands, where)
    )


def _parse_lines(text: str) -> list[SMInstruction]:
    instructions = []
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.split("#", 1)[0].strip()
        if line:
            instructions.append(_parse_line(line, lineno))
    return instructions


def _parse_json_element(raw: Any, index: int) -> SMInstruction:
    where = f"element {index}"
    if not isinstance(raw, dict):
        raise IRParsingError(f"{where}: expected an object, got {type(raw).__name__}")
    opcode = _parse_opcode(raw.get("opcode", ""), where)
    operands = raw.get("operands", [])
    if not isinstance(operands, list):
        raise IRParsingError(f"{where}: operands must be a list")
    return SMInstruction(
        opcode=opcode, operands=_coerce_operands(opcode, operands, where)
    )


def _parse_json(text: str) -> list[SMInstruction]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise IRParsingError(f"Failed to parse program as JSON: {exc}") from exc
    if not isinstance(data, list):
        raise IRParsingError(f"Expected JSON array, got {type(data).__name__}")
    return [_parse_json_element(item, i) for i, item in enumerate(data, start=1)]


def parse_program(text: str) -> list[SMInstruction]:
    """Parse a stack-machine program.

    Accepts either one instruction per line (``CONST 5``, ``BINOP +``,
    ``#`` starts a comment) or a JSON array of
    ``{"opcode": ..., "operands": [...]}`` objects.

    Raises:
        IRParsingError: On an unknown opcode or malformed operands.
    """
    stripped = text.strip()
    if stripped.startswith("["):
        instructions = _parse_json(stripped)
    else:
        instructions = _parse_lines(text)
    logger.info("Parsed %d stack-machine instructions", len(instructions))
    return instructions


def load_program(path: Path | str) -> list[SMInstruction]:
    logger.info("Loading stack-machine program from %s", path)
    return parse_program(Path(path).read_text())
