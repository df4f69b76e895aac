"""Block inliner: declared names, fresh names and collision renames."""

import pytest

from goreduce.golite import parse, resolve
from goreduce.golite.symbols import StaleIndexError
from goreduce.oracle import text_oracle
from goreduce.reduce.gate import OracleGate
from goreduce.reduce.inline import BlockInliner, declared_names, fresh_name
from goreduce.reduce.undo import Undo


def _body(stmts: str):
    file = parse("package main\n\nfunc main() {\n" + stmts + "}\n")
    return file, file.decls[0].body


def test_declared_names_top_level_only():
    file, body = _body(
        "\ta, b := 1, 2\n\tvar c, d int\n\ttype T int\n\tconst e = 1\n"
        "\tc = 3\n\t{\n\t\tinner := 1\n\t}\n"
    )
    assert [i.name for i in declared_names(body.stmts)] == ["a", "b", "c", "d", "T", "e"]


def test_fresh_name_skips_visible_and_nested_names():
    file, body = _body("\tx := 1\n\tx_ := 2\n\t{\n\t\tx__ := 3\n\t}\n")
    index = resolve(file)
    scope = index.scopes[body]
    assert fresh_name(scope, "x", set()) == "x___"
    assert fresh_name(scope, "y", {"y_"}) == "y__"


def _inliner(file, predicate):
    gate = OracleGate(file, text_oracle(predicate), check_invariants=True)
    logged = []
    return BlockInliner(gate, lambda node, desc: logged.append(desc)), logged


def test_renames_declaration_and_uses():
    file, body = _body("\tv := 1\n\t{\n\t\tv := 2\n\t\tv++\n\t\tprintln(v)\n\t}\n\tprintln(v)\n")
    inliner, logged = _inliner(file, lambda s: True)
    block = body.stmts[1]
    undo = Undo()
    inliner.rename_collisions(block, undo)
    assert block.stmts[0].lhs[0].name == "v_"
    assert block.stmts[1].x.name == "v_"
    assert block.stmts[2].x.args[0].name == "v_"
    assert body.stmts[2].x.args[0].name == "v"
    undo()
    assert block.stmts[0].lhs[0].name == "v"


def test_two_collisions_get_distinct_names():
    file, body = _body(
        "\ta := 1\n\tb := 2\n\t{\n\t\ta, b := 3, 4\n\t\tprintln(a, b)\n\t}\n\tprintln(a, b)\n"
    )
    inliner, logged = _inliner(file, lambda s: True)
    assert inliner.inline_block(body, "stmts")
    assert logged == ["block inlined"]
    assert [t.name for t in body.stmts[2].lhs] == ["a_", "b_"]
    assert [a.name for a in body.stmts[3].x.args] == ["a_", "b_"]


def test_later_parent_declaration_counts_as_collision():
    file, body = _body("\t{\n\t\tw := 1\n\t\tprintln(w)\n\t}\n\tw := 2\n\tprintln(w)\n")
    inliner, logged = _inliner(file, lambda s: True)
    assert inliner.inline_block(body, "stmts")
    assert body.stmts[0].lhs[0].name == "w_"
    assert body.stmts[2].lhs[0].name == "w"


def test_rejected_inline_is_reverted():
    file, body = _body("\tv := 1\n\t{\n\t\tv := 2\n\t\tprintln(v)\n\t}\n\tprintln(v)\n")
    inliner, logged = _inliner(file, lambda s: False)
    stmts = body.stmts
    assert not inliner.inline_block(body, "stmts")
    assert body.stmts is stmts
    assert stmts[1].stmts[0].lhs[0].name == "v"
    assert logged == []


def test_unindexed_block_is_stale():
    file, body = _body("\t{\n\t}\n")
    inliner, logged = _inliner(file, lambda s: True)
    file2, body2 = _body("\t{\n\t}\n")
    with pytest.raises(StaleIndexError):
        inliner.rename_collisions(body2.stmts[0], Undo())
