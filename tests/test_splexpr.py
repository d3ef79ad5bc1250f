import pytest

from xsmcomp.splenv import SplError
from xsmcomp.splexpr import ExpressionCompiler
from xsmcomp.splnodes import NodeType, nonterm_node, term_node


def reg(n):
    return term_node(NodeType.REG, None, n)


def num(v):
    return term_node(NodeType.NUM, None, v)


def binop(kind, a, b):
    return nonterm_node(kind, a, b)


def compiled(node):
    comp = ExpressionCompiler()
    comp.compile(node)
    return comp


def test_add_of_two_registers():
    comp = compiled(binop(NodeType.ADD, reg(1), reg(2)))
    assert comp.lines == ["MOV R16, R1", "ADD R16, R2"]
    assert comp.regcount == 1


def test_number_loads_into_first_compiler_register():
    comp = compiled(num(7))
    assert comp.lines == ["MOV R16, 7"]
    assert comp.code == "MOV R16, 7\n"


def test_none_emits_nothing():
    comp = compiled(None)
    assert comp.lines == []
    assert comp.regcount == 0


TREES = [
    binop(NodeType.ADD, reg(1), reg(2)),
    binop(NodeType.SUB, reg(1), binop(NodeType.MUL, num(2), num(3))),
    binop(NodeType.LT, reg(4), binop(NodeType.ADD, num(1), num(2))),
    binop(NodeType.EQ, binop(NodeType.MOD, num(9), reg(3)), binop(NodeType.DIV, num(8), num(2))),
    nonterm_node(NodeType.NOT, binop(NodeType.AND, reg(0), reg(1)), None),
    nonterm_node(NodeType.ADDR_EXPR, binop(NodeType.ADD, reg(5), num(4)), None),
    term_node(NodeType.STRING, '"hello"', 0),
]


@pytest.mark.parametrize("tree", TREES)
def test_expression_leaves_one_register_in_use(tree):
    comp = compiled(tree)
    assert comp.regcount == 1


@pytest.mark.parametrize("tree", TREES)
def test_line_count_matches_emitted_lines(tree):
    comp = compiled(tree)
    assert comp.line_count == len(comp.lines)


def test_reversed_comparison_uses_swapped_opcode():
    comp = compiled(binop(NodeType.LT, reg(4), binop(NodeType.ADD, num(1), num(2))))
    assert comp.lines[-1].startswith("GT R16")
    assert comp.lines[-1].endswith("R4")


def test_reversed_le_becomes_ge():
    comp = compiled(binop(NodeType.LE, reg(2), num(5)))
    assert comp.lines[-1].startswith("GE ")


def test_non_commuting_with_register_left_and_expression_right():
    comp = compiled(binop(NodeType.SUB, reg(1), binop(NodeType.MUL, num(2), num(3))))
    assert comp.lines[0] == "MOV R16, R1"
    assert comp.lines[-1] == "SUB R16, R17"
    assert comp.regcount == 1


def test_immediate_right_operand_after_expression():
    comp = compiled(binop(NodeType.DIV, binop(NodeType.ADD, reg(1), reg(2)), num(4)))
    assert comp.lines[-1] == "DIV R16, 4"


def test_not_of_register():
    comp = compiled(nonterm_node(NodeType.NOT, reg(3), None))
    assert comp.lines == ["MOV R16, 1", "SUB R16, R3"]


def test_address_expression_dereferences_top():
    comp = compiled(nonterm_node(NodeType.ADDR_EXPR, num(100), None))
    assert comp.lines[-1] == "MOV R16, [R16]"


def test_string_literal_is_copied_verbatim():
    comp = compiled(term_node(NodeType.STRING, '"abc"', 0))
    assert comp.lines[0].endswith('"abc"')


def test_port_and_special_register_names():
    comp = compiled(binop(NodeType.ADD, reg(24), reg(21)))
    assert "BP" in comp.lines[0]
    assert comp.lines[1].endswith("P1")


def _nested(depth):
    tree = binop(NodeType.ADD, num(1), num(2))
    for _ in range(depth - 1):
        tree = binop(NodeType.ADD, num(1), tree)
    return tree


def test_four_nested_levels_fit():
    comp = compiled(_nested(4))
    assert comp.regcount == 1


def test_register_overflow_raises():
    with pytest.raises(SplError):
        compiled(_nested(5))


def test_unknown_register_number_raises():
    with pytest.raises(SplError):
        compiled(reg(99))


def test_unhandled_node_type_raises():
    with pytest.raises(SplError):
        compiled(term_node(NodeType.HALT, None, 0))