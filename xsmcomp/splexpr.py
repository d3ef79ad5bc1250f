"""Code generation for SPL expressions.

Intermediate values are held in the registers reserved for the compiler,
R16 upwards, used as a small stack of at most four entries.
"""

from __future__ import annotations

from .splenv import SplError, register_name
from .splnodes import C_REG_BASE, NodeType

# Holding this many intermediate values at once is an overflow.
MAX_TEMPORARIES = 5

# Opcode of each comparison or logical operator, and the opcode used when
# the operands are evaluated in the reverse order.
_COMPARISONS = {
    NodeType.LT: ("LT", "GT"),
    NodeType.GT: ("GT", "LT"),
    NodeType.EQ: ("EQ", "EQ"),
    NodeType.LE: ("LE", "GE"),
    NodeType.GE: ("GE", "LE"),
    NodeType.NE: ("NE", "NE"),
    NodeType.AND: ("MUL", "MUL"),
    NodeType.OR: ("ADD", "ADD"),
}

# Arithmetic operators; the flag tells whether the operation commutes.
_ARITHMETIC = {
    NodeType.ADD: ("ADD", True),
    NodeType.MUL: ("MUL", True),
    NodeType.SUB: ("SUB", False),
    NodeType.DIV: ("DIV", False),
    NodeType.MOD: ("MOD", False),
}


class ExpressionCompiler:
    """Emits assembly for the expression nodes of an SPL syntax tree.

    ``regcount`` is the number of compiler registers in use; an expression
    leaves its value in the topmost one. ``line_count`` counts emitted
    instructions; label definitions are not counted.
    """

    def __init__(self):
        self.lines: list[str] = []
        self.line_count = 0
        self.regcount = 0
        self._dispatch = self._handlers()

    @property
    def code(self):
        """The assembly emitted so far, one line each."""
        return "".join(f"{line}\n" for line in self.lines)

    def emit(self, *lines):
        """Append instructions, counting each one."""
        self.lines.extend(lines)
        self.line_count += len(lines)

    def place(self, line):
        """Append a line that is not an instruction, such as a label."""
        self.lines.append(line)

    def compile(self, node):
        """Emit code for ``node``; nothing is emitted for None."""
        if node is None:
            return
        handler = self._dispatch.get(node.nodetype)
        if handler is None:
            raise SplError(f"Unknown Command {node.nodetype} {node.name}")
        handler(node)

    def _handlers(self):
        handlers = {}
        for kind, (op, swapped) in _COMPARISONS.items():
            handlers[kind] = self._comparison_handler(op, swapped)
        for kind, (op, commutes) in _ARITHMETIC.items():
            handlers[kind] = self._arithmetic_handler(op, commutes)
        handlers.update({
            NodeType.NOT: self._not,
            NodeType.ADDR_EXPR: self._address,
            NodeType.NUM: self._number,
            NodeType.STRING: self._string,
            NodeType.REG: self._register,
        })
        return handlers

    # register stack

    def _top(self, depth=1):
        """Name of the compiler register ``depth`` places from the top."""
        return f"R{C_REG_BASE + self.regcount - depth}"

    def _next(self):
        """Name of the first free compiler register."""
        return f"R{C_REG_BASE + self.regcount}"

    def _push(self):
        self.regcount += 1
        if self.regcount >= MAX_TEMPORARIES:
            raise SplError("Register Overflow. Please reduce size of your expression.")

    def _pop(self):
        self.regcount -= 1

    # handlers

    def _comparison_handler(self, op, swapped):
        def handler(node):
            self._comparison(op, swapped, node)
        return handler

    def _arithmetic_handler(self, op, commutes):
        def handler(node):
            self._arithmetic(op, commutes, node)
        return handler

    def _comparison(self, op, swapped, node):
        left, right = node.ptr1, node.ptr2
        if left.nodetype == NodeType.REG:
            reg1 = register_name(left.value)
            if right.nodetype == NodeType.REG:
                reg2 = register_name(right.value)
                target = self._next()
                self.emit(f"MOV {target}, {reg1}", f"{op} {target}, {reg2}")
                self._push()
            else:
                self.compile(right)
                self.emit(f"{swapped} {self._top()}, {reg1}")
        else:
            self.compile(left)
            if right.nodetype == NodeType.REG:
                self.emit(f"{op} {self._top()}, {register_name(right.value)}")
            else:
                self.compile(right)
                self.emit(f"{op} {self._top(2)}, {self._top()}")
                self._pop()

    def _arithmetic(self, op, commutes, node):
        left, right = node.ptr1, node.ptr2
        if left.nodetype == NodeType.REG:
            reg1 = register_name(left.value)
            if right.nodetype in (NodeType.REG, NodeType.NUM):
                operand = (register_name(right.value)
                           if right.nodetype == NodeType.REG else right.value)
                target = self._next()
                self.emit(f"MOV {target}, {reg1}", f"{op} {target}, {operand}")
                self._push()
            elif commutes:
                self.compile(right)
                self.emit(f"{op} {self._top()}, {reg1}")
            else:
                self.emit(f"MOV {self._next()}, {reg1}")
                self._push()
                self.compile(right)
                self.emit(f"{op} {self._top(2)}, {self._top()}")
                self._pop()
        else:
            self.compile(left)
            if right.nodetype == NodeType.REG:
                self.emit(f"{op} {self._top()}, {register_name(right.value)}")
            elif right.nodetype == NodeType.NUM:
                self.emit(f"{op} {self._top()}, {right.value}")
            else:
                self.compile(right)
                self.emit(f"{op} {self._top(2)}, {self._top()}")
                self._pop()

    def _not(self, node):
        self.emit(f"MOV {self._next()}, 1")
        self._push()
        operand = node.ptr1
        if operand.nodetype == NodeType.REG:
            self.emit(f"SUB {self._top()}, {register_name(operand.value)}")
        else:
            self.compile(operand)
            self.emit(f"SUB {self._top(2)}, {self._top()}")
            self._pop()

    def _address(self, node):
        self.compile(node.ptr1)
        top = self._top()
        self.emit(f"MOV {top}, [{top}]")

    def _number(self, node):
        self.emit(f"MOV {self._next()}, {node.value}")
        self._push()

    def _string(self, node):
        self.emit(f"MOV {self._next()}, {node.name}")
        self._push()

    def _register(self, node):
        self.emit(f"MOV {self._next()}, {register_name(node.value)}")
        self._push()