"""Code generation for ExpL expressions, function calls and runtime calls."""

from __future__ import annotations

from functools import partial

from .explast import NodeKind
from .explsymbols import SymbolTable

_BINARY = {
    NodeKind.LE: "LE",
    NodeKind.GE: "GE",
    NodeKind.LT: "LT",
    NodeKind.GT: "GT",
    NodeKind.DEQ: "EQ",
    NodeKind.NEQ: "NE",
    NodeKind.PLUS: "ADD",
    NodeKind.MINUS: "SUB",
    NodeKind.MUL: "MUL",
    NodeKind.DIV: "DIV",
    NodeKind.MOD: "MOD",
}

EXPOSCALL_ARGS = 4


class CodegenError(Exception):
    """Raised when a syntax tree cannot be turned into assembly."""


class ExpressionGenerator:
    """Emits assembly for expression nodes of an ExpL syntax tree.

    ``address_mode`` asks the next identifier for its address instead of its
    value; ``field_mode`` asks the next identifier, array element or field
    for the address it was read from. Both reset once used.
    """

    MAX_REGISTER = 16

    def __init__(self, symbols=None):
        self.symbols = symbols if symbols is not None else SymbolTable()
        self.lines: list[str] = []
        self.counter = -1
        self.label = 3
        self.address_mode = False
        self.field_mode = False
        self._read_call = False
        self._dispatch = self._handlers()

    @property
    def code(self):
        """The assembly emitted so far, one instruction per line."""
        return "".join(f"{line}\n" for line in self.lines)

    def emit(self, line):
        """Append one line of assembly."""
        self.lines.append(line)

    def new_label(self):
        """Return the next unused label number."""
        self.label += 1
        return self.label

    def get_register(self):
        """Take the next free register."""
        if self.counter >= self.MAX_REGISTER:
            raise CodegenError("Running out of registers")
        self.counter += 1
        return self.counter

    def free_register(self):
        """Release the most recently taken register."""
        if self.counter >= 0:
            self.counter -= 1

    def free_all_registers(self):
        """Release every register."""
        self.counter = -1

    def generate(self, node):
        """Emit code for ``node``; return the register holding its value, or 0."""
        if node is None:
            return 0
        handler = self._dispatch.get(node.nodetype)
        if handler is None:
            raise CodegenError(f"Unknown node type {node.nodetype}")
        result = handler(node)
        return 0 if result is None else result

    def _handlers(self):
        handlers = {kind: partial(self._binary, op) for kind, op in _BINARY.items()}
        handlers.update({
            NodeKind.EXPR: self._arguments,
            NodeKind.DEFAULT: self._sequence,
            NodeKind.AND: partial(self._logical, "JZ", "MUL"),
            NodeKind.OR: partial(self._logical, "JNZ", "ADD"),
            NodeKind.NOT: self._not,
            NodeKind.ID: self._identifier,
            NodeKind.FIELD: self._field,
            NodeKind.ARRAY: self._array,
            NodeKind.NUM: self._number,
            NodeKind.STRVAL: self._string,
            NodeKind.NILL: self._nill,
            NodeKind.FUNC: self._call,
            NodeKind.ALLOC: self._alloc,
            NodeKind.FREE: self._free,
            NodeKind.INIT: self._init,
            NodeKind.EXPOSCALL: self._exposcall,
        })
        return handlers

    # helpers

    def _global_entry(self, node):
        entry = node.gentry if node.gentry is not None else self.symbols.glookup(node.name)
        if entry is None:
            raise CodegenError(f"Un-declared identifier {node.name}")
        return entry

    def _local_address(self, offset, target, scratch):
        self.emit(f"MOV R{scratch},BP")
        self.emit(f"MOV R{target},{offset + 1}")
        self.emit(f"ADD R{scratch},R{target}")

    def _param_address(self, offset, addr):
        self.emit(f"MOV R{addr},BP")
        scratch = self.get_register()
        self.emit(f"MOV R{scratch},2")
        self.emit(f"SUB R{addr},R{scratch}")
        self.emit(f"MOV R{scratch},{offset + 1}")
        self.emit(f"SUB R{addr},R{scratch}")
        self.free_register()

    def _save_registers(self):
        for reg in range(self.counter + 1):
            self.emit(f"PUSH R{reg}")
        return self.counter

    def _restore_registers(self, status):
        for reg in range(status, -1, -1):
            self.emit(f"POP R{reg}")
        self.counter = status
        return status + 1

    def _load_return_value(self, popped):
        r1 = self.get_register()
        r2 = self.get_register()
        self.emit(f"MOV R{r1},{popped + 5}")
        self.emit(f"MOV R{r2},SP")
        self.emit(f"ADD R{r2},R{r1}")
        self.emit(f"MOV R{r1},[R{r2}]")
        self.free_register()
        return r1

    def _field_chain(self, node, type_, base, addr):
        fields = type_.fields if type_ is not None else []
        link = node.ptr2
        while link is not None:
            for index, member in enumerate(fields, start=1):
                if member.name == link.name:
                    reg = self.get_register()
                    self.emit(f"MOV R{reg},{index}")
                    self.emit(f"ADD R{reg},R{base}")
                    self.emit(f"MOV R{base},[R{reg}]")
                    self.free_register()
                    addr = reg
                    break
            link = link.ptr2
        return addr

    # handlers

    def _arguments(self, node):
        count = len(node.ptr3 or ())
        if count == 0:
            raise CodegenError("argument list for a function without parameters")
        current = node
        for _ in range(count - 1):
            if current is None:
                raise CodegenError("fewer arguments than parameters")
            reg = self.generate(current.ptr1)
            self.emit(f"PUSH R{reg}")
            self.free_register()
            current = current.ptr2
        if current is None:
            raise CodegenError("fewer arguments than parameters")
        reg = self.generate(current)
        self.emit(f"PUSH R{reg}")
        self.free_register()
        return 0

    def _sequence(self, node):
        self.generate(node.ptr1)
        self.generate(node.ptr2)
        return 0

    def _binary(self, op, node):
        r1 = self.generate(node.ptr1)
        r2 = self.generate(node.ptr2)
        self.emit(f"{op} R{r1},R{r2}")
        self.free_register()
        return r1

    def _logical(self, jump, combine, node):
        r1 = self.generate(node.ptr1)
        r2 = self.get_register()
        self.emit(f"MOV R{r2},1")
        skip = self.new_label()
        self.emit(f"{jump} R{r1},L{skip}")
        r3 = self.generate(node.ptr2)
        self.emit(f"MOV R{r2},R{r3}")
        self.free_register()
        self.emit(f"L{skip}:")
        self.emit(f"{combine} R{r1},R{r2}")
        self.free_register()
        return r1

    def _not(self, node):
        r1 = self.generate(node.ptr2)
        false_label = self.new_label()
        self.emit(f"JNZ R{r1},L{false_label}")
        self.emit(f"MOV R{r1},1")
        end_label = self.new_label()
        self.emit(f"JMP L{end_label}")
        self.emit(f"L{false_label}:")
        self.emit(f"MOV R{r1},0")
        self.emit(f"L{end_label}:")
        return r1

    def _identifier(self, node):
        r1 = self.get_register()
        local = self.symbols.llookup(node.name)
        if local is not None:
            r2 = self.get_register()
            self._local_address(self.symbols.locals.index(local), r1, r2)
            if self.address_mode:
                self.emit(f"MOV R{r1},R{r2}")
                self.address_mode = False
            else:
                self.emit(f"MOV R{r1},[R{r2}]")
                if self.field_mode:
                    self.emit(f"MOV R{r1},R{r2}")
                    self.field_mode = False
            self.free_register()
            return r1
        param = self.symbols.plookup(node.name)
        if param is not None:
            r2 = self.get_register()
            self._param_address(self.symbols.params.index(param), r2)
            self.emit(f"MOV R{r1},[R{r2}]")
            self.address_mode = False
            self.field_mode = False
            self.free_register()
            return r1
        binding = self._global_entry(node).binding
        if self.address_mode:
            self.emit(f"MOV R{r1},{binding}")
            self.address_mode = False
        else:
            self.emit(f"MOV R{r1},[{binding}]")
            if self.field_mode:
                self.emit(f"MOV R{r1},{binding}")
                self.field_mode = False
        return r1

    def _field(self, node):
        r1 = self.get_register()
        local = self.symbols.llookup(node.name)
        param = None if local is not None else self.symbols.plookup(node.name)
        if local is not None:
            r2 = self.get_register()
            self._local_address(self.symbols.locals.index(local), r1, r2)
            self.emit(f"MOV R{r1},[R{r2}]")
            self.free_register()
            addr = self._field_chain(node, local.type, r1, r2)
        elif param is not None:
            r2 = self.get_register()
            self._param_address(self.symbols.params.index(param), r2)
            self.emit(f"MOV R{r1},[R{r2}]")
            self.free_register()
            addr = self._field_chain(node, param.type, r1, r2)
        else:
            entry = self._global_entry(node)
            self.emit(f"MOV R{r1},[{entry.binding}]")
            addr = self._field_chain(node, entry.type, r1, None)
        if self.field_mode:
            if addr is None:
                raise CodegenError(f"no field address for {node.name}")
            self.emit(f"MOV R{r1},R{addr}")
            self.field_mode = False
        return r1

    def _array(self, node):
        saved = self.field_mode
        self.field_mode = False
        offset = self.generate(node.ptr2)
        self.field_mode = saved
        r1 = self.get_register()
        self.emit(f"MOV R{r1},{self._global_entry(node.ptr1).binding}")
        self.emit(f"ADD R{r1},R{offset}")
        self.emit(f"MOV R{offset},[R{r1}]")
        if self.field_mode:
            self.emit(f"MOV R{offset},R{r1}")
            self.field_mode = False
        self.free_register()
        return offset

    def _number(self, node):
        r1 = self.get_register()
        self.emit(f"MOV R{r1},{node.value}")
        return r1

    def _string(self, node):
        r1 = self.get_register()
        self.emit(f'MOV R{r1},"{node.name}"')
        return r1

    def _nill(self, node):
        r1 = self.get_register()
        self.emit(f"MOV R{r1},-1")
        return r1

    def _call(self, node):
        status = self._save_registers()
        self.free_all_registers()
        if node.ptr2 is not None:
            self.generate(node.ptr2)
        elif node.ptr3 is not None:
            reg = self.generate(node.ptr3)
            self.emit(f"PUSH R{reg}")
            self.free_register()
        self.emit("PUSH R0")
        entry = self.symbols.glookup(node.name)
        if entry is None:
            raise CodegenError(f"Un-declared function {node.name}")
        self.emit(f"CALL F{entry.binding}")
        self.emit(f"POP R{status + 1}")
        if status == -1:
            self.get_register()
        scratch = self.get_register()
        for _ in entry.paramlist:
            self.emit(f"POP R{scratch}")
        if status == -1:
            self.free_register()
        self.free_register()
        self._restore_registers(status)
        return self.get_register()

    def _alloc(self, node):
        status = self._save_registers()
        self.free_all_registers()
        self.emit('MOV R0,"Alloc"')
        self.emit("PUSH R0")
        self.emit("MOV R0,8")
        self.emit("PUSH R0")
        self.emit("ADD SP,2")
        self.emit("PUSH R0")
        self.emit("CALL 0")
        self.emit("SUB SP,5")
        popped = self._restore_registers(status)
        return self._load_return_value(popped)

    def _free(self, node):
        self.get_register()
        target = self.generate(node.ptr2)
        status = self._save_registers()
        self.free_all_registers()
        self.emit('MOV R0,"Free"')
        self.emit("PUSH R0")
        self.emit(f"PUSH R{target}")
        self.emit("ADD SP,2")
        self.emit("PUSH R0")
        self.emit("CALL 0")
        self.emit("SUB SP,5")
        self._restore_registers(status)
        return 0

    def _init(self, node):
        status = self._save_registers()
        self.free_all_registers()
        self.emit('MOV R0,"Heapset"')
        self.emit("PUSH R0")
        self.emit("ADD SP,3")
        self.emit("PUSH R0")
        self.emit("CALL 0")
        self.emit("SUB SP,5")
        self._restore_registers(status)
        return 0

    def _exposcall(self, node):
        status = self._save_registers()
        self.free_all_registers()
        current = node.ptr3
        if current is None:
            raise CodegenError("exposcall without a function code")
        if current.name == "Read":
            self._read_call = True
        if current.nodetype == NodeKind.STRVAL:
            self.emit(f'MOV R0,"{current.name}"')
            self.emit("PUSH R0")
        elif current.nodetype == NodeKind.ID:
            reg = self.generate(current)
            self.emit(f"MOV R0,R{reg}")
            self.emit("PUSH R0")
        arg_count = 1
        current = current.ptr1
        while current is not None:
            if current.nodetype == NodeKind.STRVAL:
                self.emit(f'MOV R0,"{current.name}"')
            elif current.nodetype == NodeKind.NUM:
                self.emit(f"MOV R0,{current.value}")
            elif current.nodetype in (NodeKind.ID, NodeKind.ARRAY, NodeKind.FIELD):
                if arg_count == 2 and self._read_call:
                    self.field_mode = True
                    self._read_call = False
                reg = self.generate(current)
                self.emit(f"MOV R0,R{reg}")
            self.emit("PUSH R0")
            arg_count += 1
            current = current.ptr1
        if arg_count > EXPOSCALL_ARGS:
            raise CodegenError("too many arguments to exposcall")
        for _ in range(EXPOSCALL_ARGS - arg_count):
            self.emit("PUSH R0")
        self.emit("PUSH R0")
        self.emit("CALL 0")
        self.emit("SUB SP,5")
        popped = self._restore_registers(status)
        return self._load_return_value(popped)