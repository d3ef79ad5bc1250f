import pytest

from xsmcomp.explsymbols import GLOBAL_BASE, SymbolError, SymbolTable, flookup


@pytest.fixture
def table():
    symbols = SymbolTable()
    symbols.tinstall("integer", 1, [])
    symbols.tinstall("string", 1, [])
    return symbols


def test_global_variables_get_consecutive_bindings(table):
    integer = table.tlookup("integer")
    a = table.ginstall("a", integer, 1)
    arr = table.ginstall("arr", integer, 10)
    b = table.ginstall("b", integer, 1)
    assert a.binding == GLOBAL_BASE
    assert arr.binding == a.binding + 1
    assert b.binding == arr.binding + 10
    assert table.glookup("arr") is arr


def test_functions_get_function_numbers(table):
    integer = table.tlookup("integer")
    f = table.ginstall("f", integer, -1)
    g = table.ginstall("g", integer, -1)
    assert (f.binding, g.binding) == (0, 1)
    assert table.total_count == GLOBAL_BASE


def test_duplicate_global_raises(table):
    table.ginstall("x", table.tlookup("integer"), 1)
    with pytest.raises(SymbolError):
        table.ginstall("x", table.tlookup("string"), 1)


def test_locals_take_memory_words(table):
    start = table.total_count
    first = table.linstall("i", table.tlookup("integer"))
    second = table.linstall("j", table.tlookup("integer"))
    assert first.binding == start
    assert second.binding == start + 1
    assert table.llookup("j") is second
    assert table.llookup("k") is None


def test_params_lookup_in_order(table):
    table.pinstall("p", table.tlookup("integer"))
    table.pinstall("q", table.tlookup("string"))
    assert [p.name for p in table.params] == ["p", "q"]
    assert table.plookup("q").type is table.tlookup("string")
    assert table.plookup("r") is None


def test_tinstall_uses_pending_fields(table):
    table.tinstall("dummy", 0, [])
    table.finstall(table.tlookup("integer"), "value")
    table.finstall(table.tlookup("dummy"), "next")
    node = table.tinstall("node", 0)
    assert node.size == len(node.fields) == 2
    assert [f.field_index for f in node.fields] == [0, 1]
    assert flookup("next", node.fields).type is node
    assert flookup("value", node.fields).type is table.tlookup("integer")
    assert flookup("missing", node.fields) is None
    assert table.pending_fields == []


def test_dump_lists_globals(table):
    table.ginstall("count", table.tlookup("integer"), 1)
    assert table.dump() == f"count----integer-----{GLOBAL_BASE}\n"