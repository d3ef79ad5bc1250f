"""Code generation for SPL statements: assignment, control flow, I/O and jumps."""

from __future__ import annotations

from .splenv import SplError, register_name
from .splexpr import ExpressionCompiler
from .spllabels import LabelTable
from .splnodes import NodeType

_SIMPLE = {
    NodeType.BACKUP: "BACKUP",
    NodeType.RESTORE: "RESTORE",
    NodeType.RETURN: "RET",
    NodeType.IRETURN: "IRET",
    NodeType.HALT: "HALT",
    NodeType.BREAKPOINT: "BRKP",
    NodeType.READ: "IN",
}

_TRANSFERS = {
    NodeType.LOADI: "LOADI",
    NodeType.LOAD: "LOAD",
    NodeType.STORE: "STORE",
}


class SplCompiler(ExpressionCompiler):
    """Emits assembly for a whole SPL syntax tree, statements included.

    Jumps to labels that were never declared are not emitted; a message for
    each is kept in ``warnings``.
    """

    def __init__(self, labels=None):
        self.labels = labels if labels is not None else LabelTable()
        self.warnings: list[str] = []
        super().__init__()

    def compile(self, node):
        """Emit code for ``node``; nothing is emitted for None."""
        super().compile(node)

    def _handlers(self):
        handlers = super()._handlers()
        for kind, text in _SIMPLE.items():
            handlers[kind] = self._simple_handler(text)
        for kind, op in _TRANSFERS.items():
            handlers[kind] = self._transfer_handler(op)
        handlers.update({
            NodeType.STMTLIST: self._statements,
            NodeType.ASSIGN: self._assign,
            NodeType.IF: self._if,
            NodeType.WHILE: self._while,
            NodeType.BREAK: self._break,
            NodeType.CONTINUE: self._continue,
            NodeType.MULTIPUSH: self._multipush,
            NodeType.MULTIPOP: self._multipop,
            NodeType.READI: self._readi,
            NodeType.PRINT: self._print,
            NodeType.INLINE: self._inline,
            NodeType.ENCRYPT: self._encrypt,
            NodeType.LABEL_DEF: self._label_def,
            NodeType.CALL: self._call,
            NodeType.GOTO: self._goto,
        })
        return handlers

    # helpers

    def _simple_handler(self, text):
        def handler(node):
            self.emit(text)
        return handler

    def _transfer_handler(self, op):
        def handler(node):
            self._transfer(op, node)
        return handler

    def _condition_jump(self, cond, target):
        if cond.nodetype == NodeType.REG:
            self.emit(f"JZ {register_name(cond.value)}, {target.name}")
        else:
            self.compile(cond)
            self.emit(f"JZ {self._top()}, {target.name}")
            self._pop()

    @staticmethod
    def _chain(node):
        items = []
        while node is not None:
            items.append(node)
            node = node.ptr1
        return items

    def _store_into(self, dest, source):
        """Emit the store of ``source`` into the operand text ``dest``.

        ``dest`` may be a callable giving the text once ``source`` has been
        evaluated, since its position on the register stack may shift.
        """
        if source.nodetype == NodeType.REG:
            self.emit(f"MOV {dest()}, {register_name(source.value)}")
        elif source.nodetype == NodeType.NUM:
            self.emit(f"MOV {dest()}, {source.value}")
        elif source.nodetype == NodeType.STRING:
            self.emit(f"MOV {dest()}, {source.name}")
        elif source.nodetype == NodeType.PORT:
            scratch = self._next()
            self.emit(f"PORT {scratch}, {register_name(source.value)}")
            self.place(f"MOV {dest()}, {scratch}")
        else:
            self.compile(source)
            self.emit(f"MOV {dest(depth=2)}, {self._top()}")
            self._pop()

    # handlers

    def _statements(self, node):
        self.compile(node.ptr1)
        self.compile(node.ptr2)

    def _assign(self, node):
        target, source = node.ptr1, node.ptr2
        if target.nodetype == NodeType.ADDR_EXPR:
            address = target.ptr1
            if address.nodetype == NodeType.NUM:
                text = f"[{address.value}]"
                self._store_into(lambda depth=1: text, source)
            elif address.nodetype == NodeType.REG:
                text = f"[{register_name(address.value)}]"
                self._store_into(lambda depth=1: text, source)
            else:
                self.compile(address)
                self._store_into(lambda depth=1: f"[{self._top(depth)}]", source)
                self._pop()
        else:
            text = register_name(target.value)
            self._store_into(lambda depth=1: text, source)

    def _if(self, node):
        else_label = self.labels.create()
        end_label = self.labels.create()
        self._condition_jump(node.ptr1, else_label)
        self.compile(node.ptr2)
        self.emit(f"JMP {end_label.name}")
        self.place(f"{else_label.name}:")
        self.compile(node.ptr3)
        self.place(f"{end_label.name}:")

    def _while(self, node):
        start = self.labels.create()
        end = self.labels.create()
        self.labels.push_while(start, end)
        self.place(f"{start.name}:")
        self._condition_jump(node.ptr1, end)
        self.compile(node.ptr2)
        self.emit(f"JMP {start.name}")
        self.labels.pop_while()
        self.place(f"{end.name}:")

    def _break(self, node):
        self.emit(f"JMP {self.labels.while_end().name}")

    def _continue(self, node):
        self.emit(f"JMP {self.labels.while_start().name}")

    def _transfer(self, op, node):
        first, second = node.ptr1, node.ptr2
        if first.nodetype == NodeType.REG:
            reg1 = register_name(first.value)
            if second.nodetype == NodeType.REG:
                self.emit(f"{op} {reg1}, {register_name(second.value)}")
            elif second.nodetype == NodeType.NUM:
                self.emit(f"{op} {reg1}, {second.value}")
            else:
                self.compile(second)
                self.emit(f"{op} {reg1}, {self._top()}")
                self._pop()
        else:
            self.compile(first)
            if second.nodetype == NodeType.REG:
                self.emit(f"{op} {self._top()}, {register_name(second.value)}")
            elif second.nodetype == NodeType.NUM:
                self.emit(f"{op} {self._top()}, {second.value}")
            else:
                self.compile(second)
                self.emit(f"{op} {self._top(2)}, {self._top()}")
                self._pop()
            self._pop()

    def _multipush(self, node):
        for item in self._chain(node.ptr1):
            self.emit(f"PUSH {register_name(item.value)}")

    def _multipop(self, node):
        for item in reversed(self._chain(node.ptr1)):
            self.emit(f"POP {register_name(item.value)}")

    def _readi(self, node):
        self.emit("INI", f"PORT {register_name(node.ptr1.value)}, P0")

    def _print(self, node):
        self.compile(node.ptr1)
        self.emit(f"PORT P1, {self._top()}", "OUT")
        self._pop()

    def _inline(self, node):
        self.emit(node.ptr1.name)

    def _encrypt(self, node):
        self.emit(f"ENCRYPT {register_name(node.ptr1.value)}")

    def _label_def(self, node):
        self.place(f"{node.ptr1.name}:")

    def _call(self, node):
        target = node.ptr1
        if target.nodetype == NodeType.NUM:
            self.place(f"CALL {target.value}")
        elif self.labels.get(target.name) is None:
            raise SplError(f"{node.value}: Label '{target.name}' is not declared")
        else:
            self.place(f"CALL {target.name}")

    def _goto(self, node):
        target = node.ptr1
        if target.nodetype == NodeType.NUM:
            self.place(f"JMP {target.value}")
        elif self.labels.get(target.name) is None:
            self.warnings.append(f"{node.value}: Label '{target.name}' is not declared")
        else:
            self.place(f"JMP {target.name}")


def compile_tree(root, labels=None):
    """Assembly text for a whole SPL syntax tree."""
    compiler = SplCompiler(labels)
    compiler.compile(root)
    return compiler.code