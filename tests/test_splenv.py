import pytest

from xsmcomp.splenv import Environment, SplError, register_name
from xsmcomp.splnodes import (
    BP_REG,
    EMA_REG,
    P0,
    PTBR_REG,
    NodeType,
    term_node,
)


@pytest.mark.parametrize(
    "value, expected",
    [(0, "R0"), (15, "R15"), (P0, "P0"), (P0 + 3, "P3"),
     (BP_REG, "BP"), (PTBR_REG, "PTBR"), (EMA_REG, "EMA")],
)
def test_register_name(value, expected):
    assert register_name(value) == expected


@pytest.mark.parametrize("value", [16, 19, 99, -1])
def test_register_name_rejects_unknown(value):
    with pytest.raises(SplError):
        register_name(value)


def test_insert_and_lookup_constant():
    env = Environment()
    env.insert_constant("PAGE_SIZE", 512)
    assert env.lookup_constant("PAGE_SIZE").value == 512
    assert env.lookup_constant("MISSING") is None


def test_duplicate_constant_raises():
    env = Environment()
    env.insert_constant("X", 1)
    with pytest.raises(SplError, match="Multiple Definitions"):
        env.insert_constant("X", 2)


def test_push_alias_and_lookup():
    env = Environment()
    env.push_alias("counter", 3)
    assert env.lookup_alias("counter").reg == 3
    assert env.lookup_alias_reg(3).name == "counter"


def test_alias_clashing_with_constant_raises():
    env = Environment()
    env.insert_constant("limit", 10)
    with pytest.raises(SplError, match="symbolic"):
        env.push_alias("limit", 1)


def test_alias_redeclared_in_same_block_raises():
    env = Environment()
    env.push_alias("a", 1)
    with pytest.raises(SplError, match="current block"):
        env.push_alias("a", 2)


def test_alias_same_register_renames():
    env = Environment()
    env.push_alias("a", 1)
    env.push_alias("b", 1)
    assert env.lookup_alias("a") is None
    assert env.lookup_alias("b").reg == 1
    assert len(env.aliases) == 1


def test_inner_block_shadows_and_pop_restores():
    env = Environment()
    env.push_alias("a", 1)
    env.depth = 1
    env.push_alias("a", 2)
    assert env.lookup_alias("a").reg == 2
    env.pop_alias()
    env.depth = 0
    assert env.lookup_alias("a").reg == 1


def test_pop_alias_keeps_outer_block():
    env = Environment()
    env.push_alias("a", 1)
    env.depth = 1
    env.push_alias("b", 2)
    env.push_alias("c", 4)
    env.pop_alias()
    assert [a.name for a in env.aliases] == ["a"]


def test_load_constants(tmp_path):
    cfg = tmp_path / "consts.cfg"
    cfg.write_text("ONE 1\nNEG -7\n")
    env = Environment()
    env.load_constants(cfg)
    assert env.lookup_constant("ONE").value == 1
    assert env.lookup_constant("NEG").value == -7


def test_load_constants_stops_at_bad_value(tmp_path):
    cfg = tmp_path / "consts.cfg"
    cfg.write_text("A 1\nB oops\nC 3\n")
    env = Environment()
    env.load_constants(cfg)
    assert env.lookup_constant("A").value == 1
    assert env.lookup_constant("B") is None
    assert env.lookup_constant("C") is None


def test_load_constants_missing_file(tmp_path):
    env = Environment()
    with pytest.raises(SplError, match="Unable to open"):
        env.load_constants(tmp_path / "absent.cfg")


def test_substitute_constant():
    env = Environment()
    env.insert_constant("K", 42)
    node = env.substitute_id(term_node(NodeType.IDENT, "K", 0))
    assert node.nodetype == NodeType.NUM
    assert node.value == 42
    assert node.name is None


def test_substitute_alias():
    env = Environment()
    env.push_alias("tmp", 5)
    node = env.substitute_id(term_node(NodeType.IDENT, "tmp", 0))
    assert node.nodetype == NodeType.REG
    assert node.value == 5
    assert register_name(node.value) == "R5"


def test_substitute_unknown_raises():
    env = Environment()
    with pytest.raises(SplError, match="Unknown identifier"):
        env.substitute_id(term_node(NodeType.IDENT, "nothing", 0))