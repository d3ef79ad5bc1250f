"""Label names and the stack of enclosing loops for the SPL compiler."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Label:
    """A named jump target."""

    name: str


class LabelError(Exception):
    """Raised for a redeclared label or a loop statement outside a loop."""


class LabelTable:
    """Declared labels, a generator of fresh label names and the loop stack."""

    def __init__(self):
        self._declared: list[Label] = []
        self._next_id = 1
        self._loops: list[tuple[Label, Label]] = []

    def create(self):
        """Return a new label with an unused generated name."""
        label = Label(f"_L{self._next_id}")
        self._next_id += 1
        return label

    def add(self, name, line=0):
        """Declare a label by name; redeclaring one is an error."""
        if self.get(name) is not None:
            raise LabelError(f"{line}: Label '{name}' redeclared.")
        label = Label(name)
        self._declared.insert(0, label)
        return label

    def get(self, name):
        """Return the declared label of this name, or None."""
        return next((lab for lab in self._declared if lab.name == name), None)

    def push_while(self, start, end):
        """Enter a loop whose start and end labels are given."""
        self._loops.append((start, end))

    def pop_while(self):
        """Leave the innermost loop."""
        if not self._loops:
            raise LabelError("not inside a loop")
        self._loops.pop()

    def while_end(self):
        """End label of the innermost loop."""
        if not self._loops:
            raise LabelError("break outside a loop")
        return self._loops[-1][1]

    def while_start(self):
        """Start label of the innermost loop."""
        if not self._loops:
            raise LabelError("continue outside a loop")
        return self._loops[-1][0]