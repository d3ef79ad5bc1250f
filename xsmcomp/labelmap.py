"""Map of assembly labels to the addresses they resolve to."""

from __future__ import annotations

NOT_FOUND = -1


class LabelMap:
    """Labels in the order they were recorded, each with its address."""

    def __init__(self):
        self._entries: list[tuple[str, int]] = []

    def append(self, label, addr):
        """Record a label's address."""
        self._entries.append((label, addr))

    def find(self, name):
        """Address of the first label of this name, or -1 if there is none."""
        return next((addr for label, addr in self._entries if label == name), NOT_FOUND)

    def dump(self):
        """Text listing of all labels with their addresses."""
        return "".join(f"{label} : {addr}\n" for label, addr in self._entries)

    def __len__(self):
        return len(self._entries)