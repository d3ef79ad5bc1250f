# xsmcomp

Code generation back ends for two small teaching languages that compile to
assembly for the XSM machine:

* **SPL**, a systems language for writing an operating system kernel.
  Programs work directly on machine registers, ports and memory.
* **ExpL**, an application language with functions, arrays, user-defined
  types and a heap.

The package takes syntax trees that have already been built and turns them
into XSM assembly text. It uses only the standard library and needs
Python 3.10 or later.

## Modules

### SPL

| Module | Purpose |
| --- | --- |
| `xsmcomp.splnodes` | `NodeType`, `Node`, and the helpers `term_node`, `nonterm_node` and `attach` for building trees. `is_allowed_register` is true for R0 to R15; R16 and up are kept for the compiler. |
| `xsmcomp.spllabels` | `LabelTable` hands out fresh labels named `_L1`, `_L2`, ... (`create`), records named labels (`add`, `get`) and keeps the stack of enclosing loops (`push_while`, `pop_while`, `while_start`, `while_end`). Redeclaring a label, or asking for a loop label outside a loop, raises `LabelError`. |
| `xsmcomp.splpaths` | `expand_path` replaces a leading `$NAME` path component with the variable's value; `remove_extension` and `output_filename` derive the `.xsm` output name. |
| `xsmcomp.splenv` | `Environment` holds symbolic constants and block-scoped register aliases, loads constants from a `name value` file (`load_constants`) and resolves identifiers with `substitute_id`. `register_name` gives the assembly name of a register number. Errors raise `SplError`. |
| `xsmcomp.splexpr` | `ExpressionCompiler` emits code for arithmetic, relational and logical expressions, using R16 upwards as a small stack; more than four intermediate values raise `SplError`. |
| `xsmcomp.splcodegen` | `SplCompiler` adds statements: assignment, `if`, `while`, `break`, `continue`, load and store, multipush and multipop, I/O, inline code, labels, `CALL` and `JMP`. A call to an undeclared label raises `SplError`; a jump to one is left out and noted in `warnings`. `compile_tree` is the one-call entry point. |

### ExpL

| Module | Purpose |
| --- | --- |
| `xsmcomp.explast` | `NodeKind`, `ASTNode` and `tree_create`. |
| `xsmcomp.explsymbols` | `SymbolTable` with global, local, parameter, type and pending-field tables; globals are placed from address 4096 and functions numbered from 0. `flookup` finds a field. Redeclaring a global raises `SymbolError`. |
| `xsmcomp.explexpr` | `ExpressionGenerator` with register and label allocation, and code for expressions, identifiers, fields, arrays, function calls, `alloc`, `free`, heap initialisation and `exposcall`. Failures such as running out of registers raise `CodegenError`. |
| `xsmcomp.explcodegen` | `CodeGenerator` adds statements: assignment, read, write, `if`, `while`, `break`, `continue`, `return` and breakpoints. `generate_code` runs it over a tree. |
| `xsmcomp.explruntime` | `initialize_routine`, `alloc_routine` and `free_routine` return the assembly of the heap helper routines. |
| `xsmcomp.labelmap` | `LabelMap` records label addresses (`append`, `find`, `dump`); `find` gives -1 for an unknown label. |

## Examples

SPL: `R0 = R1 + 5`

```python
from xsmcomp.splcodegen import compile_tree
from xsmcomp.splnodes import Node, NodeType, nonterm_node, term_node

tree = nonterm_node(
    NodeType.ASSIGN,
    term_node(NodeType.REG, value=0),
    nonterm_node(NodeType.ADD, term_node(NodeType.REG, value=1),
                 term_node(NodeType.NUM, value=5)),
)
print(compile_tree(tree), end="")
# MOV R16, R1
# ADD R16, 5
# MOV R0, R16
```

ExpL: `x = 3` for a global `x`

```python
from xsmcomp.explast import NodeKind, tree_create
from xsmcomp.explcodegen import generate_code
from xsmcomp.explsymbols import SymbolTable

symbols = SymbolTable()
symbols.ginstall("x", None, 1)            # bound to address 4096
tree = tree_create(None, NodeKind.ASGN,
                   ptr1=tree_create(None, NodeKind.ID, "x"),
                   ptr2=tree_create(None, NodeKind.NUM, value=3))
print(generate_code(tree, symbols), end="")
# MOV R0,3
# MOV [4096],R0
```

Path helpers:

```python
from xsmcomp.splpaths import output_filename

output_filename("kernel/int10.spl")   # "kernel/int10.xsm"
```

## What the package does not do

* It has no lexer or parser: trees must be built by the caller.
* It has no command-line program and writes no files; the generators
  return assembly text.
* `LabelMap` only stores label addresses; the package has no pass that
  rewrites symbolic jumps in an assembly file into addresses.

## Running the tests

The tests use pytest, installed with the `test` extra:

```
pytest
```