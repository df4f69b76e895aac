"""Name resolution tests: symbols, scopes, references and verification."""

import pytest

from goreduce.golite import StaleIndexError, parse, resolve, verify
from goreduce.golite.ast import Ident
from goreduce.golite.resolve import import_name
from goreduce.golite.symbols import KIND_CONST, KIND_FUNC, KIND_PKG, KIND_TYPE, KIND_VAR
from goreduce.reduce.walk import walk


def _idents(file, name: str) -> list[Ident]:
    return [n for n in walk(file) if isinstance(n, Ident) and n.name == name]


def _setup(source: str):
    file = parse(source)
    return file, resolve(file)


def test_local_variable_references():
    file, index = _setup(
        "package main\n\nfunc main() {\n\tx := 1\n\tx = 2\n\tprintln(x)\n}\n"
    )
    decl, assign, use = _idents(file, "x")
    sym = index.declares[decl]
    assert sym.kind == KIND_VAR
    assert index.references[assign] is sym
    assert index.references[use] is sym
    assert index.occurrences_of(sym) == [assign, use]
    assert index.ref_count(sym) == 2


def test_blank_is_never_declared():
    file, index = _setup("package main\n\nfunc main() {\n\t_ = 1\n\t_, y := 1, 2\n\tprintln(y)\n}\n")
    for ident in _idents(file, "_"):
        assert ident not in index.declares
        assert ident not in index.references


def test_redeclaration_in_same_scope_is_a_use():
    file, index = _setup(
        "package main\n\nfunc f() (int, error) {\n\treturn 0, nil\n}\n\n"
        "func main() {\n\ta, err := f()\n\tb, err := f()\n\tprintln(a, b, err)\n}\n"
    )
    first, second, use = _idents(file, "err")
    sym = index.declares[first]
    assert second not in index.declares
    assert index.references[second] is sym
    assert index.references[use] is sym


def test_shadowing_in_nested_block():
    file, index = _setup(
        "package main\n\nfunc main() {\n\tx := 1\n\t{\n\t\tx := 2\n\t\tprintln(x)\n\t}\n\tprintln(x)\n}\n"
    )
    outer, inner, inner_use, outer_use = _idents(file, "x")
    assert index.references[inner_use] is index.declares[inner]
    assert index.references[outer_use] is index.declares[outer]


def test_use_before_local_declaration_resolves_outward():
    file, index = _setup(
        "package main\n\nvar x = 1\n\nfunc main() {\n\tprintln(x)\n\tx := 2\n\tprintln(x)\n}\n"
    )
    pkg_x, first_use, local_x, second_use = _idents(file, "x")
    assert index.references[first_use] is index.declares[pkg_x]
    assert index.references[second_use] is index.declares[local_x]


def test_package_level_forward_reference():
    file, index = _setup("package main\n\nfunc main() {\n\tprintln(later)\n}\n\nvar later = 1\n")
    use, decl = _idents(file, "later")
    assert index.references[use] is index.declares[decl]


def test_define_rhs_sees_outer_name():
    file, index = _setup(
        "package main\n\nfunc main() {\n\tx := 1\n\t{\n\t\tx := x + 1\n\t\tprintln(x)\n\t}\n}\n"
    )
    outer, inner, rhs, use = _idents(file, "x")
    assert index.references[rhs] is index.declares[outer]
    assert index.references[use] is index.declares[inner]


def test_symbol_kinds():
    file, index = _setup(
        'package main\n\nimport "fmt"\n\nconst c = 1\n\ntype T int\n\n'
        "func helper() {\n}\n\nfunc main() {\n\tvar v T = c\n\thelper()\n\tfmt.Println(v)\n}\n"
    )
    kinds = {sym.name: sym.kind for sym in index.symbols}
    assert kinds["fmt"] == KIND_PKG
    assert kinds["c"] == KIND_CONST
    assert kinds["T"] == KIND_TYPE
    assert kinds["helper"] == KIND_FUNC
    assert kinds["v"] == KIND_VAR
    assert "main" in kinds


def test_unresolved_names_are_not_recorded():
    file, index = _setup('package main\n\nfunc main() {\n\tprintln(len("x"), true)\n}\n')
    for name in ("println", "len", "true"):
        for ident in _idents(file, name):
            assert ident not in index.references


def test_selector_resolves_only_base():
    file, index = _setup(
        'package main\n\nimport "strings"\n\nfunc main() {\n\tprintln(strings.ToUpper("a"))\n}\n'
    )
    (pkg,) = _idents(file, "strings")
    (sel,) = _idents(file, "ToUpper")
    assert index.references[pkg].kind == KIND_PKG
    assert sel not in index.references


@pytest.mark.parametrize(
    "spec,expected",
    [
        ('import "fmt"', "fmt"),
        ('import "math/rand"', "rand"),
        ('import r "math/rand"', "r"),
        ('import "math/rand/v2"', "rand"),
        ('import "gopkg.in/yaml.v3"', "yaml"),
        ('import "github.com/mattn/go-sqlite3"', "sqlite3"),
        ('import "github.com/jackc/pgx/v5"', "pgx"),
    ],
)
def test_import_names(spec: str, expected: str):
    file = parse("package main\n\n" + spec + "\n")
    assert import_name(file.decls[0].specs[0]) == expected


def test_versioned_import_resolves_uses():
    file, index = _setup(
        'package main\n\nimport "math/rand/v2"\n\nfunc main() {\n\tprintln(rand.IntN(3))\n}\n'
    )
    (use,) = _idents(file, "rand")
    sym = index.references[use]
    assert sym.kind == KIND_PKG
    assert sym.name == "rand"
    assert index.ref_count(sym) == 1


def test_blank_and_dot_imports_bind_nothing():
    file, index = _setup('package main\n\nimport (\n\t_ "os"\n\t. "math"\n)\n')
    assert [s for s in index.symbols if s.kind == KIND_PKG] == []


def test_import_symbol_points_at_spec():
    file, index = _setup('package main\n\nimport "fmt"\n\nfunc main() {\n\tfmt.Println()\n}\n')
    (use,) = _idents(file, "fmt")
    sym = index.references[use]
    assert sym.import_spec is file.decls[0].specs[0]


def test_struct_literal_keys_are_field_names():
    file, index = _setup(
        "package main\n\ntype P struct{ X int }\n\nfunc main() {\n\tX := 1\n\tp := P{X: X}\n\tprintln(p)\n}\n"
    )
    field_decl, decl, key, value = _idents(file, "X")
    assert key not in index.references
    assert index.references[value] is index.declares[decl]


def test_map_literal_keys_are_expressions():
    file, index = _setup(
        "package main\n\nfunc main() {\n\tk := \"a\"\n\tm := map[string]int{k: 1}\n\tprintln(m)\n}\n"
    )
    decl, key = _idents(file, "k")
    assert index.references[key] is index.declares[decl]


def test_named_map_type_keys_are_expressions():
    file, index = _setup(
        "package main\n\ntype M map[string]int\n\nfunc main() {\n\tk := \"a\"\n\tm := M{k: 1}\n\tprintln(m)\n}\n"
    )
    decl, key = _idents(file, "k")
    assert index.references[key] is index.declares[decl]


def test_keys_of_imported_map_type_are_expressions():
    file, index = _setup(
        'package main\n\nimport "net/http"\n\nfunc main() {\n\tk := "a"\n\th := http.Header{k: nil}\n'
        "\tprintln(len(h))\n\tprintln(k)\n}\n"
    )
    decl, key, use = _idents(file, "k")
    sym = index.declares[decl]
    assert index.references[key] is sym
    assert index.ref_count(sym) == 2
    verify(index, file)


def test_parameters_and_closures():
    file, index = _setup(
        "package main\n\nfunc apply(n int) int {\n\tf := func(m int) int {\n\t\treturn m + n\n\t}\n\treturn f(n)\n}\n"
    )
    n_decl, n_in_closure, n_arg = _idents(file, "n")
    assert index.references[n_in_closure] is index.declares[n_decl]
    assert index.references[n_arg] is index.declares[n_decl]


def test_range_and_switch_scopes():
    file, index = _setup(
        "package main\n\nfunc main() {\n"
        "\tfor i, v := range []int{1} {\n\t\tprintln(i, v)\n\t}\n"
        "\tswitch x := 1; x {\n\tcase 1:\n\t\ty := x\n\t\tprintln(y)\n\t}\n"
        "}\n"
    )
    i_decl, i_use = _idents(file, "i")
    assert index.references[i_use] is index.declares[i_decl]
    y_decl, y_use = _idents(file, "y")
    clause_scope = index.declares[y_decl].scope
    assert clause_scope.lookup("y") is index.declares[y_decl]
    assert clause_scope.parent.lookup("x") is not None


def test_scopes_are_indexed_by_node():
    file, index = _setup("package main\n\nfunc main() {\n\t{\n\t\tx := 1\n\t\tprintln(x)\n\t}\n}\n")
    body = file.decls[0].body
    inner = body.stmts[0]
    assert index.scopes[inner].parent is index.scopes[body]
    assert index.scopes[body].parent is index.scopes[file]
    assert index.scopes[body].declares_below("x")
    assert index.scopes[inner].lookup("x") is not None


@pytest.mark.parametrize(
    "decl,untyped",
    [
        ("const c = 1", True),
        ('const c = "s"', True),
        ("const c = -(1 + 2)", True),
        ("const c = true", True),
        ("const c int = 1", False),
        ("const c = len(\"ab\")", False),
        ("const (\n\tc = iota\n)", True),
    ],
)
def test_untyped_constants(decl: str, untyped: bool):
    file, index = _setup("package main\n\n" + decl + "\n")
    (sym,) = [s for s in index.symbols if s.name == "c"]
    assert sym.untyped is untyped


def test_untyped_through_other_constants():
    file, index = _setup("package main\n\nconst a = b * 2\n\nconst b = 3\n\nconst t int = 1\n\nconst u = t\n")
    syms = {s.name: s for s in index.symbols}
    assert syms["a"].untyped
    assert not syms["u"].untyped


def test_implicitly_repeated_constant_has_no_value():
    file, index = _setup("package main\n\nconst (\n\ta = 1\n\tb\n)\n")
    syms = {s.name: s for s in index.symbols}
    assert syms["a"].value() is not None
    assert syms["b"].value() is None
    assert not syms["b"].untyped


def test_verify_accepts_fresh_index():
    file, index = _setup("package main\n\nfunc main() {\n\tx := 1\n\tprintln(x)\n}\n")
    verify(index, file)


def test_verify_detects_renamed_declaration():
    file, index = _setup("package main\n\nfunc main() {\n\tx := 1\n\tprintln(x)\n}\n")
    decl = _idents(file, "x")[0]
    decl.name = "y"
    with pytest.raises(StaleIndexError):
        verify(index, file)


def test_verify_detects_unindexed_reference():
    file, index = _setup("package main\n\nfunc main() {\n\tx := 1\n\tprintln(x)\n}\n")
    call = file.decls[0].body.stmts[1].x
    call.args = call.args + [Ident(call.pos, "x")]
    with pytest.raises(StaleIndexError):
        verify(index, file)
