"""Code generation for ExpL statements: assignment, I/O, control flow, return."""

from __future__ import annotations

from .explast import NodeKind
from .explexpr import CodegenError, ExpressionGenerator

# Memory word used to pass the address of an array element to the read call.
READ_ADDRESS_SLOT = 2044


class CodeGenerator(ExpressionGenerator):
    """Emits assembly for a whole ExpL syntax tree, statements included."""

    def __init__(self, symbols=None):
        super().__init__(symbols)
        self.loop_start = None
        self.loop_end = None

    def generate(self, node):
        """Emit code for ``node``; return the register holding its value, or 0."""
        return super().generate(node)

    def _handlers(self):
        handlers = super()._handlers()
        handlers.update({
            NodeKind.ASGN: self._assign,
            NodeKind.ARRAY_ASGN: self._array_assign,
            NodeKind.READ: self._read,
            NodeKind.ARRAY_READ: self._array_read,
            NodeKind.WRITE: self._write,
            NodeKind.IF: self._if,
            NodeKind.IF_ELSE: self._if_else,
            NodeKind.WHILE: self._while,
            NodeKind.RET: self._return,
            NodeKind.BRK: self._break,
            NodeKind.CONTINUE: self._continue,
            NodeKind.BRKP: self._breakpoint,
        })
        return handlers

    # helpers

    @staticmethod
    def _target(node, child):
        if child is None:
            raise CodegenError(f"missing operand for node type {node.nodetype}")
        return child

    def _finish_read(self, temporary, status):
        self.emit("ADD SP,2")
        self.free_all_registers()
        self.emit("CALL 0")
        self.emit("SUB SP,5")
        for _ in range(temporary):
            self.emit("POP R0")
        self._restore_registers(status)

    def _read_prologue(self):
        self.emit('MOV R0,"Read"')
        self.emit("PUSH R0")
        self.emit("MOV R0,-1")
        self.emit("PUSH R0")

    # handlers

    def _assign(self, node):
        target = self._target(node, node.ptr1)
        number = self.generate(node.ptr2)
        if target.nodetype == NodeKind.FIELD:
            self.field_mode = True
            r1 = self.generate(target)
            self.emit(f"MOV [R{r1}],R{number}")
            self.free_register()
        else:
            local = self.symbols.llookup(target.name)
            param = None if local is not None else self.symbols.plookup(target.name)
            if local is not None:
                r1 = self.get_register()
                r2 = self.get_register()
                self._local_address(self.symbols.locals.index(local), r1, r2)
                self.emit(f"MOV [R{r2}],R{number}")
                self.free_register()
                self.free_register()
            elif param is not None:
                r1 = self.get_register()
                self._param_address(self.symbols.params.index(param), r1)
                self.emit(f"MOV [R{r1}],R{number}")
                self.free_register()
            else:
                binding = self._global_entry(target).binding
                self.emit(f"MOV [{binding}],R{number}")
        self.free_register()
        return 0

    def _array_assign(self, node):
        array = self._target(node, node.ptr1)
        offset = self.generate(node.ptr2)
        r1 = self.get_register()
        self.emit(f"MOV R{r1},{self._global_entry(array).binding}")
        self.emit(f"ADD R{offset},R{r1}")
        self.free_register()
        r1 = self.generate(node.ptr3)
        self.emit(f"MOV [R{offset}],R{r1}")
        self.free_register()
        self.free_register()
        return 0

    def _read(self, node):
        target = self._target(node, node.ptr2)
        temporary = 0
        if target.nodetype == NodeKind.FIELD:
            self.field_mode = True
            self._save_registers()
            self._read_prologue()
            r2 = self.generate(target)
            self.emit(f"PUSH R{r2}")
            self.free_register()
            temporary += 1
            status = self.counter
        else:
            local = self.symbols.llookup(target.name)
            param = None if local is not None else self.symbols.plookup(target.name)
            if local is not None:
                r2 = self.get_register()
                r3 = self.get_register()
                self._local_address(self.symbols.locals.index(local), r2, r3)
                self._save_registers()
                self._read_prologue()
                self.emit(f"PUSH R{r3}")
                self.free_register()
                self.free_register()
                temporary += 2
                status = self.counter
            elif param is not None:
                r2 = self.get_register()
                self._param_address(self.symbols.params.index(param), r2)
                self._save_registers()
                self._read_prologue()
                self.emit(f"PUSH R{r2}")
                self.free_register()
                temporary += 1
                status = self.counter
            else:
                status = self._save_registers()
                self._read_prologue()
                self.emit(f"MOV R0,{self._global_entry(target).binding}")
                self.emit("PUSH R0")
        self._finish_read(temporary, status)
        return 0

    def _array_read(self, node):
        array = self._target(node, node.ptr2)
        entry = self._global_entry(array)
        offset = self.generate(node.ptr3)
        r1 = self.get_register()
        self.emit(f"MOV R{r1},{entry.binding}")
        r2 = self.get_register()
        self.emit(f"MOV R{r2},{entry.size}")
        self.emit(f"GT R{r2},R{offset}")
        in_bounds = self.new_label()
        self.emit(f"JNZ R{r2},L{in_bounds}")
        self.emit("INT 10")
        self.emit(f"L{in_bounds}:")
        self.free_register()
        self.emit(f"ADD R{offset},R{r1}")
        self.free_register()
        self.emit(f"MOV [{READ_ADDRESS_SLOT}],R{offset}")
        self._save_registers()
        self._read_prologue()
        self.emit(f"MOV R0,[{READ_ADDRESS_SLOT}]")
        self.emit("PUSH R0")
        self.free_register()
        status = self.counter
        self._finish_read(1, status)
        return 0

    def _write(self, node):
        status = self._save_registers()
        self.emit('MOV R0,"Write"')
        self.emit("PUSH R0")
        self.emit("MOV R0,-2")
        self.emit("PUSH R0")
        number = self.generate(node.ptr2)
        self.emit(f"PUSH R{number}")
        self.free_register()
        self.emit("ADD SP,2")
        self.free_all_registers()
        self.emit("CALL 0")
        self.emit("SUB SP,5")
        self._restore_registers(status)
        return 0

    def _if(self, node):
        end = self.new_label()
        number = self.generate(node.ptr1)
        self.emit(f"JZ R{number},L{end}")
        self.generate(node.ptr2)
        self.emit(f"L{end}:")
        self.free_register()
        return 0

    def _if_else(self, node):
        number = self.generate(node.ptr1)
        else_label = self.new_label()
        end = self.new_label()
        self.emit(f"JZ R{number},L{else_label}")
        self.free_register()
        self.generate(node.ptr2)
        self.emit(f"JMP L{end}")
        self.emit(f"L{else_label}:")
        self.free_register()
        self.generate(node.ptr3)
        self.emit(f"L{end}:")
        return 0

    def _while(self, node):
        start = self.new_label()
        end = self.new_label()
        self.loop_start = start
        self.loop_end = end
        self.emit(f"L{start}:")
        number = self.generate(node.ptr1)
        self.emit(f"JZ R{number},L{end}")
        self.free_register()
        self.generate(node.ptr2)
        self.emit(f"JMP L{start}")
        self.emit(f"L{end}:")
        self.free_register()
        return 0

    def _return(self, node):
        result = self.generate(node.ptr2)
        r1 = self.get_register()
        self.emit(f"MOV R{r1},BP")
        r2 = self.get_register()
        self.emit(f"MOV R{r2},2")
        self.emit(f"SUB R{r1},R{r2}")
        self.free_register()
        self.emit(f"MOV [R{r1}],R{result}")
        self.free_register()
        self.free_register()
        for _ in self.symbols.locals:
            self.emit("POP R0")
        self.emit("MOV BP,[SP]")
        self.emit("POP R0")
        self.emit("RET")
        return 0

    def _break(self, node):
        if self.loop_end is None:
            raise CodegenError("break outside a loop")
        self.emit(f"JMP L{self.loop_end}")
        return 0

    def _continue(self, node):
        if self.loop_start is None:
            raise CodegenError("continue outside a loop")
        self.emit(f"JMP L{self.loop_start}")
        return 0

    def _breakpoint(self, node):
        self.emit("BRKP")
        return 0


def generate_code(root, symbols=None):
    """Assembly text for a whole syntax tree."""
    generator = CodeGenerator(symbols)
    generator.generate(root)
    return generator.code