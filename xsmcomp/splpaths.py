"""File name helpers for the SPL compiler."""

from __future__ import annotations

import os


def expand_path(path, environ=None):
    """Replace a leading ``$NAME`` path component with the variable's value.

    The first component, less its first character, is looked up in
    ``environ`` (the process environment by default); if it is not set the
    component is left as it is.
    """
    env = os.environ if environ is None else environ
    first, sep, rest = path.partition("/")
    value = env.get(first[1:]) if first else None
    head = value if value is not None else first
    return f"{head}/{rest}" if sep else head


def remove_extension(pathname):
    """Cut the name after its last dot, keeping the dot.

    A name without a dot becomes empty.
    """
    index = pathname.rfind(".")
    return pathname[: index + 1]


def output_filename(inpfname):
    """Name of the compiled output file for a source file."""
    return remove_extension(inpfname) + "xsm"