import sys
import pytest

import hindley
from fphack import ExceptionMonad
from hindley import infer, analyse, prelude, examples, main, UndefinedSymbol
from hmtypes import TypeVariable, Function, INTEGER, BOOLEAN, InferenceError, prune
from signature import signature
from terms import Id, Lambda, Apply, Let, Letrec, lamb, app
from unify import unify, TypeMismatch, RecursiveUnification


def typ(term, env=None):
    return ExceptionMonad.ret(term) @ infer(..., env) @ str


@pytest.mark.parametrize("name, expected", [
    ("identity", "int"),
    ("factorial", "int -> int"),
    ("polymorphic", "pair(int, bool)"),
    ("constant", "int"),
    ("pinned", "a -> pair(a, a)"),
    ("compose", "(a -> b) -> (b -> c) -> a -> c"),
    ("recursive", "a -> b"),
])
def test_examples(name, expected):
    assert typ(examples()[name]) == expected


def self_reference():
    v = TypeVariable()
    return RecursiveUnification(v, Function(v, TypeVariable()))


@pytest.mark.parametrize("name, error", [
    ("mismatch", TypeMismatch(BOOLEAN, INTEGER)),
    ("undefined", UndefinedSymbol("f")),
    ("self_application", self_reference()),
])
def test_examples_failing(name, error):
    assert typ(examples()[name]) == error


def test_function_application():
    assert typ(Apply(Lambda("x", Id("x")), Id("3"))) == "int"


def test_let_generalization():
    identity = Lambda("x", Id("x"))
    assert typ(Let("id", identity, Apply(Id("id"), Id("3")))) == "int"
    assert typ(Let("id", identity, Apply(Id("id"), Id("true")))) == "bool"
    assert typ(Let("id", identity, app("pair", app("id", "3"), app("id", "true")))) == \
        "pair(int, bool)"


def test_lambda_bound_is_monomorphic():
    # the same program as a lambda argument instead of a let
    term = app(lamb("id", app("pair", app("id", "3"), app("id", "true"))),
               lamb("x", "x"))
    assert typ(term) == TypeMismatch(BOOLEAN, INTEGER)


def test_letrec_is_monomorphic_in_its_definition():
    assert typ(Letrec("f", Lambda("n", Apply(Id("f"), Id("n"))), Id("f"))) == "a -> b"
    # f is used at int and bool inside its own definition
    term = Letrec("f", lamb("n", app("pair", app("f", "3"), app("f", "true"))), Id("f"))
    assert typ(term) == TypeMismatch(BOOLEAN, INTEGER)


def test_letrec_is_generic_in_its_body():
    term = Letrec("f", lamb("x", "x"), app("pair", app("f", "3"), app("f", "true")))
    assert typ(term) == "pair(int, bool)"


def test_if():
    assert typ(app("if", "true", "1", "2")) == "int"
    assert typ(app("if", "true", "false", "true")) == "bool"
    assert typ(app("if", "1", "1", "2")) == TypeMismatch(INTEGER, BOOLEAN)
    assert typ(app("if", "true", "1", "false")) == TypeMismatch(BOOLEAN, INTEGER)


def test_undefined_symbol():
    assert typ(Id("unbound_name"), {}) == UndefinedSymbol("unbound_name")
    assert typ(Id("3"), {}) == "int"
    try:
        infer(Id("unbound_name"), {})
        assert False
    except InferenceError as e:
        assert type(e) is UndefinedSymbol
        assert e.name == "unbound_name"
        assert isinstance(e, TypeError)


def test_occurs_check():
    v = TypeVariable()
    for t in (Function(v, INTEGER), Function(INTEGER, v), Function(v, v)):
        with pytest.raises(RecursiveUnification):
            unify(v, t)
        assert v.instance is None


def test_mismatch():
    with pytest.raises(TypeMismatch) as e:
        unify(INTEGER, BOOLEAN)
    assert (e.value.left, e.value.right) == ("int", "bool")
    with pytest.raises(TypeMismatch) as e:
        unify(INTEGER, Function(TypeVariable(), TypeVariable()))
    assert (e.value.left, e.value.right) == ("int", "a -> b")


def test_prune_twice():
    a, b = TypeVariable(), TypeVariable()
    unify(a, b)
    unify(b, Function(INTEGER, INTEGER))
    for t in (a, b, INTEGER, Function(a, b)):
        assert prune(prune(t)) is prune(t)


def test_custom_environment():
    env = {"succ": signature("int -> int"), "eq": signature("a -> a -> bool")}
    assert typ(app("succ", "1"), env) == "int"
    assert typ(app("eq", "1"), env) == "int -> bool"
    assert typ(app("eq", "1", "2"), env) == "bool"
    assert typ(Id("true"), env) == UndefinedSymbol("true")


def test_environment_is_not_mutated():
    env = prelude()
    before = dict(env)
    analyse(Let("x", Id("1"), lamb("y", app("pair", "x", "y"))), env)
    assert dict(env) == before
    assert "x" not in env and "y" not in env


def test_prelude_is_fresh():
    assert prelude()["if"] is not prelude()["if"]
    assert prelude()["true"] is BOOLEAN


def test_variables_are_unique_across_analyses():
    t1 = infer(lamb("x", "x"))
    t2 = infer(lamb("x", "x"))
    assert prune(t1.types[0]).id != prune(t2.types[0]).id
    assert str(t1) == str(t2) == "a -> a"


def test_trace(monkeypatch, capsys):
    monkeypatch.setattr(hindley, "TRACE", True)
    infer(lamb("x", "x"))
    assert capsys.readouterr().err.splitlines() == [
        "> analysing (fn x => x)",
        "  > analysing x",
        "  < analysing x : a",
        "< analysing (fn x => x) : a -> a",
    ]


def test_no_trace_by_default(capsys):
    infer(lamb("x", "x"))
    assert capsys.readouterr().err == ""


def test_main(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["hindley", "compose", "mismatch"])
    main()
    out, err = capsys.readouterr()
    assert out == "(fn f => (fn g => (fn arg => (g (f arg))))) : (a -> b) -> (b -> c) -> a -> c\n"
    assert err == "(fn x => ((pair (x 3)) (x true))) : Type mismatch bool != int\n"


def test_main_unknown_example(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["hindley", "nope"])
    with pytest.raises(SystemExit):
        main()


def test_labels_are_kept_by_the_inferred_type():
    t = infer(lamb("x", "y", "y"))
    assert str(t) == "a -> b -> b"
    assert str(t.types[1]) == "b -> b"
    assert str(t.types[0]) == "a"
    # printing a part first does not change the labels of the whole
    t = infer(examples()["compose"])
    assert str(t.types[1]) == "(b -> c) -> a -> c"
    assert str(t) == "(a -> b) -> (b -> c) -> a -> c"


def test_large_integer_literals():
    assert typ(Id(str(2 ** 63 - 1)), {}) == "int"
    assert typ(Id("99999999999999999999999"), {}) == UndefinedSymbol("99999999999999999999999")


def test_analyse_keeps_its_name():
    assert analyse.__name__ == "analyse"
    assert infer.__name__ == "infer"
