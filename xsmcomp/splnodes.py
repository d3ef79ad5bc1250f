"""Syntax tree nodes and register numbering for the SPL compiler."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

R0 = 0
R15 = 15
R19 = 19

P0 = 20
P1 = 21
P2 = 22
P3 = 23

BP_REG = 24
IP_REG = 25
SP_REG = 26
PTBR_REG = 27
PTLR_REG = 28
EIP_REG = 29
EPN_REG = 30
EC_REG = 31
EMA_REG = 32

NO_GEN_REG = 20
NO_PORTS = 4
NO_SPECIAL_REG = 9
NUM_REGS = NO_GEN_REG + NO_SPECIAL_REG + NO_PORTS

# Registers from R16 upwards are reserved for the compiler's own use.
C_REG_BASE = 16


class NodeType(IntEnum):
    """Kinds of node in an SPL syntax tree."""

    IF = 0
    LOAD = 1
    STORE = 2
    LOADI = 3
    READ = 4
    READI = 5
    PRINT = 6
    REG = 7
    NUM = 8
    STRING = 9
    IDENT = 10
    NONTERM = 11
    STRCMP = 12
    STRCOPY = 13
    WHILE = 14
    EQ = 15
    GT = 16
    LT = 17
    LE = 18
    GE = 19
    NE = 20
    AND = 21
    OR = 22
    NOT = 23
    BREAK = 24
    CONTINUE = 25
    ADDR_EXPR = 26
    HALT = 27
    BREAKPOINT = 28
    RETURN = 29
    IRETURN = 30
    INLINE = 31
    ENCRYPT = 32
    STMTLIST = 33
    ADD = 34
    SUB = 35
    MUL = 36
    DIV = 37
    MOD = 38
    ASSIGN = 39
    BACKUP = 40
    RESTORE = 41
    GOTO = 42
    CALL = 43
    PORT = 44
    LABEL_DEF = 45
    MULTIPUSH = 46
    MULTIPOP = 47


@dataclass
class Node:
    """A node of an SPL syntax tree with up to three children."""

    nodetype: int
    name: Optional[str] = None
    value: int = 0
    ptr1: Optional["Node"] = None
    ptr2: Optional["Node"] = None
    ptr3: Optional["Node"] = None


def term_node(nodetype, name=None, value=0):
    """Create a leaf node."""
    return Node(nodetype=nodetype, name=name, value=value)


def nonterm_node(nodetype, a=None, b=None):
    """Create an inner node with two children."""
    return Node(nodetype=nodetype, ptr1=a, ptr2=b)


def attach(node, a=None, b=None, c=None):
    """Set all three children of ``node`` and return it."""
    node.ptr1 = a
    node.ptr2 = b
    node.ptr3 = c
    return node


def is_allowed_register(value):
    """Tell whether a register number may be used by programs (R0 to R15)."""
    return R0 <= value < R0 + C_REG_BASE