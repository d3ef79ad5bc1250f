"""Symbolic constants, register aliases and register names for the SPL compiler."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from .splnodes import (
    BP_REG,
    EC_REG,
    EIP_REG,
    EMA_REG,
    EPN_REG,
    IP_REG,
    P0,
    P3,
    PTBR_REG,
    PTLR_REG,
    R0,
    R15,
    SP_REG,
    NodeType,
)

CONSTANTS_FILE = "splconstants.cfg"

_SPECIAL_REGISTERS = {
    BP_REG: "BP",
    SP_REG: "SP",
    IP_REG: "IP",
    PTBR_REG: "PTBR",
    PTLR_REG: "PTLR",
    EIP_REG: "EIP",
    EPN_REG: "EPN",
    EC_REG: "EC",
    EMA_REG: "EMA",
}

_INTEGER = re.compile(r"[+-]?\d+")


class SplError(Exception):
    """Raised for errors in constants, aliases or identifiers of an SPL program."""


def register_name(value):
    """Assembly name of a register number, such as ``R3``, ``P1`` or ``PTBR``."""
    if R0 <= value <= R15:
        return f"R{value - R0}"
    if P0 <= value <= P3:
        return f"P{value - P0}"
    try:
        return _SPECIAL_REGISTERS[value]
    except KeyError:
        raise SplError(f"No register with number {value}") from None


@dataclass
class Constant:
    """A symbolic constant."""

    name: str
    value: int


@dataclass
class Alias:
    """A name given to a register inside a block."""

    name: str
    reg: int
    depth: int


class Environment:
    """The constants and register aliases visible while compiling.

    ``depth`` is the nesting depth of the current block and ``line`` the
    source line used in error messages; the parser keeps both up to date.
    """

    def __init__(self):
        self.constants: dict[str, Constant] = {}
        self.aliases: list[Alias] = []
        self.depth = 0
        self.line = 0

    def lookup_constant(self, name):
        """Return the constant of this name, or None."""
        return self.constants.get(name)

    def lookup_alias(self, name):
        """Return the innermost alias of this name, or None."""
        return next((a for a in reversed(self.aliases) if a.name == name), None)

    def lookup_alias_reg(self, reg):
        """Return the innermost alias of this register, or None."""
        return next((a for a in reversed(self.aliases) if a.reg == reg), None)

    def push_alias(self, name, reg):
        """Name a register in the current block.

        A register already aliased in the current block is renamed.
        """
        if self.lookup_constant(name) is not None:
            raise SplError(
                f"{self.line}: Alias name {name} already used as symbolic contant!!"
            )
        existing = self.lookup_alias(name)
        if existing is not None and existing.depth == self.depth:
            raise SplError(
                f"{self.line}: Alias name {name} already used as in the current block!!"
            )
        same_reg = self.lookup_alias_reg(reg)
        if same_reg is not None and same_reg.depth == self.depth:
            same_reg.name = name
            return same_reg
        alias = Alias(name, reg, self.depth)
        self.aliases.append(alias)
        return alias

    def pop_alias(self):
        """Drop the aliases made in the current block."""
        while self.aliases and self.aliases[-1].depth == self.depth:
            self.aliases.pop()

    def insert_constant(self, name, value):
        """Define a constant; defining one twice is an error."""
        if self.lookup_constant(name) is not None:
            raise SplError(f"{self.line}: Multiple Definitions for Constant {name}")
        constant = Constant(name, value)
        self.constants[name] = constant
        return constant

    def load_constants(self, path=CONSTANTS_FILE):
        """Define the constants listed as ``name value`` pairs in a file.

        Reading stops at the first pair whose value is not an integer.
        """
        try:
            text = Path(path).read_text()
        except OSError as exc:
            raise SplError(f"Unable to open {path} file!") from exc
        tokens = text.split()
        for name, value in zip(tokens[::2], tokens[1::2]):
            if not _INTEGER.fullmatch(value):
                break
            self.insert_constant(name, int(value))

    def substitute_id(self, node):
        """Turn an identifier node into a number or register node, in place."""
        constant = self.lookup_constant(node.name)
        if constant is not None:
            node.nodetype = NodeType.NUM
            node.name = None
            node.value = constant.value
            return node
        alias = self.lookup_alias(node.name)
        if alias is None:
            raise SplError(f"{self.line}: Unknown identifier {node.name} used!!")
        node.nodetype = NodeType.REG
        node.name = None
        node.value = alias.reg
        return node