"""Symbol tables of the ExpL compiler: types, fields, globals, locals, parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

GLOBAL_BASE = 4096


@dataclass(eq=False)
class Field:
    """A field of a user-defined type."""

    name: str
    type: Optional["TypeEntry"]
    field_index: int = 0


@dataclass(eq=False)
class TypeEntry:
    """An entry of the type table."""

    name: str
    size: int = 0
    fields: list[Field] = field(default_factory=list)


@dataclass(eq=False)
class Param:
    """A formal parameter of a function."""

    name: str
    type: Optional[TypeEntry]
    amp: int = 0


@dataclass(eq=False)
class GlobalSymbol:
    """A global variable, array or function."""

    name: str
    type: Optional[TypeEntry]
    size: int
    binding: int
    paramlist: list[Param] = field(default_factory=list)
    flabel: int = 0


@dataclass(eq=False)
class LocalSymbol:
    """A local variable of a function."""

    name: str
    type: Optional[TypeEntry]
    binding: int


class SymbolError(Exception):
    """Raised when a symbol is declared twice."""


def flookup(name, fields):
    """Return the field of this name in ``fields``, or None."""
    return next((f for f in fields or () if f.name == name), None)


class SymbolTable:
    """All symbol tables of one compilation, with the memory allocator state."""

    def __init__(self):
        self.globals: list[GlobalSymbol] = []
        self.locals: list[LocalSymbol] = []
        self.params: list[Param] = []
        self.types: list[TypeEntry] = []
        self.pending_fields: list[Field] = []
        self.total_count = GLOBAL_BASE
        self.fbind = 0

    def glookup(self, name):
        """Return the global symbol of this name, or None."""
        return next((g for g in self.globals if g.name == name), None)

    def ginstall(self, name, type_, size, paramlist=None):
        """Declare a global; a size of -1 declares a function."""
        if self.glookup(name) is not None:
            raise SymbolError(f'Variable re-initialized "{name}"')
        if size == -1:
            binding = self.fbind
            self.fbind += 1
        else:
            binding = self.total_count
            self.total_count += size
        symbol = GlobalSymbol(name, type_, size, binding, list(paramlist or ()))
        self.globals.append(symbol)
        return symbol

    def llookup(self, name):
        """Return the local symbol of this name, or None."""
        return next((s for s in self.locals if s.name == name), None)

    def linstall(self, name, type_):
        """Declare a local variable in the next free memory word."""
        symbol = LocalSymbol(name, type_, self.total_count)
        self.total_count += 1
        self.locals.append(symbol)
        return symbol

    def plookup(self, name):
        """Return the parameter of this name, or None."""
        return next((p for p in self.params if p.name == name), None)

    def pinstall(self, name, type_):
        """Append a formal parameter."""
        param = Param(name, type_)
        self.params.append(param)
        return param

    def tlookup(self, name):
        """Return the type of this name, or None."""
        return next((t for t in self.types if t.name == name), None)

    def tinstall(self, name, size=0, fields=None):
        """Declare a type with the given fields, or the pending ones.

        The type's size is the number of its fields. Fields whose type is
        the placeholder type ``dummy`` refer to the type being declared.
        """
        entry = TypeEntry(name)
        self.types.append(entry)
        members = list(self.pending_fields if fields is None else fields)
        dummy = self.tlookup("dummy")
        own = self.tlookup(name)
        for index, member in enumerate(members):
            if member.type is dummy:
                member.type = own
            member.field_index = index
        entry.fields = members
        entry.size = len(members)
        self.pending_fields = []
        return entry

    def finstall(self, type_, name):
        """Add a field to the list of pending fields."""
        member = Field(name, type_)
        self.pending_fields.append(member)
        return member

    def dump(self):
        """Text listing of the global symbols with their types and bindings."""
        return "".join(
            f"{g.name}----{g.type.name if g.type else None}-----{g.binding}\n"
            for g in self.globals
        )