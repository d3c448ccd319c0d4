"""
Hindley-Milner type inference for a small lambda calculus with
let-polymorphism.

The environment maps names to types. The non-generic set holds the type
variables bound by an enclosing lambda (or by a letrec while its own
definition is analysed), those are never renamed by `fresh`.
"""
import re
import sys
from functools import wraps
from typing import *
from argparse import ArgumentParser
from frozendict import frozendict  # type: ignore

from fphack import pipefy, ExceptionMonad
from terms import Term, Id, Lambda, Apply, Let, Letrec, lamb, app
from hmtypes import (Type, TypeVariable, TypeOperator, Function, INTEGER, BOOLEAN,
                     InferenceError, Namer, prune, show_type, name_variables)
from unify import unify, occurs_in, TypeMismatch
from signature import signature

TypeEnv = Mapping[str, Type]
NonGeneric = FrozenSet[TypeVariable]

INTEGER_LITERAL = re.compile(r"[+-]?[0-9]+")
MIN_INTEGER, MAX_INTEGER = -2 ** 63, 2 ** 63 - 1

# Set by --trace
TRACE = False


class UndefinedSymbol(InferenceError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Undefined symbol {name}")


def error(*args, **kwargs) -> bool:
    print(*args, file=sys.stderr, **kwargs)
    return False


def extend(env: TypeEnv, name: str, t: Type) -> TypeEnv:
    return frozendict({**env, name: t})


def is_generic(v: TypeVariable, non_generic: Iterable[Type]) -> bool:
    return not occurs_in(v, non_generic)


def fresh(t: Type, non_generic: Iterable[Type]) -> Type:
    """
    Copies `t`, replacing each generic type variable by a new one. The
    same variable is always replaced by the same new variable.
    """
    mappings: Dict[int, TypeVariable] = {}

    def freshrec(t):
        p = prune(t)
        if type(p) is TypeVariable:
            if not is_generic(p, non_generic):
                return p
            if p.id not in mappings:
                mappings[p.id] = TypeVariable()
            return mappings[p.id]
        elif type(p) is TypeOperator:
            types = tuple(freshrec(x) for x in p.types)
            if all(x is y for x, y in zip(types, p.types)):
                return p
            return TypeOperator(p.name, types)
        else:
            assert False, f"invalid type {p!r}"

    return freshrec(t)


def is_integer_literal(name: str) -> bool:
    "Integer literals are the 64 bits signed integers"
    return (INTEGER_LITERAL.fullmatch(name) is not None and
            MIN_INTEGER <= int(name) <= MAX_INTEGER)


def get_type(name: str, env: TypeEnv, non_generic: NonGeneric) -> Type:
    if name in env:
        return fresh(env[name], non_generic)
    elif is_integer_literal(name):
        return INTEGER
    raise UndefinedSymbol(name)


def indent(i):
    return "  " * i


def trace_analyse(f):
    state = {"depth": 0, "namer": Namer()}

    @wraps(f)
    def wrapper(term, env, non_generic=frozenset()):
        if not TRACE:
            return f(term, env, non_generic)
        if state["depth"] == 0:
            state["namer"] = Namer()
        depth = state["depth"]
        error(f"{indent(depth)}> analysing {term}")
        state["depth"] += 1
        try:
            t = f(term, env, non_generic)
        finally:
            state["depth"] -= 1
        error(f"{indent(depth)}< analysing {term} : {show_type(t, state['namer'])}")
        return t

    return wrapper


@trace_analyse
def analyse(term: Term, env: TypeEnv, non_generic: NonGeneric = frozenset()) -> Type:
    assert isinstance(term, Term)
    if type(term) is Id:
        return get_type(term.name, env, non_generic)
    elif type(term) is Apply:
        fun_type = analyse(term.function, env, non_generic)
        arg_type = analyse(term.argument, env, non_generic)
        result_type = TypeVariable()
        unify(Function(arg_type, result_type), fun_type)
        return result_type
    elif type(term) is Lambda:
        arg_type = TypeVariable()
        result_type = analyse(term.body,
                              extend(env, term.param, arg_type),
                              non_generic | {arg_type})
        return Function(arg_type, result_type)
    elif type(term) is Let:
        defn_type = analyse(term.definition, env, non_generic)
        return analyse(term.body, extend(env, term.name, defn_type), non_generic)
    elif type(term) is Letrec:
        new_type = TypeVariable()
        new_env = extend(env, term.name, new_type)
        defn_type = analyse(term.definition, new_env, non_generic | {new_type})
        unify(new_type, defn_type)
        return analyse(term.body, new_env, non_generic)
    else:
        assert False, f"invalid term {term!r}"


def prelude() -> TypeEnv:
    "A new default environment, type variables are not shared between calls"
    return frozendict({
        "true": BOOLEAN,
        "false": BOOLEAN,
        "if": signature("bool -> a -> a -> a"),
        "zero": signature("int -> bool"),
        "pred": signature("int -> int"),
        "times": signature("int -> int -> int"),
        "pair": signature("a -> b -> pair(a, b)"),
    })


@pipefy
def infer(term: Term, env: Optional[TypeEnv] = None) -> Type:
    env = prelude() if env is None else frozendict(env)
    return name_variables(analyse(term, env, frozenset()), Namer())


def examples() -> Dict[str, Term]:
    return {
        "identity": app(lamb("x", "x"), "3"),
        "factorial": Letrec("factorial",
                            lamb("n", app("if", app("zero", "n"),
                                          "1",
                                          app("times", "n",
                                              app("factorial", app("pred", "n"))))),
                            Id("factorial")),
        "mismatch": lamb("x", app("pair", app("x", "3"), app("x", "true"))),
        "undefined": app("pair", app("f", "4"), app("f", "true")),
        "polymorphic": Let("f", lamb("x", "x"),
                           app("pair", app("f", "4"), app("f", "true"))),
        "self_application": lamb("f", app("f", "f")),
        "constant": Let("g", lamb("f", "5"), app("g", "g")),
        "pinned": lamb("g", Let("f", lamb("x", "g"),
                                app("pair", app("f", "3"), app("f", "true")))),
        "compose": lamb("f", "g", "arg", app("g", app("f", "arg"))),
        "recursive": Letrec("f", lamb("n", app("f", "n")), Id("f")),
    }


def test_is_generic():
    a, b = TypeVariable(), TypeVariable()
    assert is_generic(a, frozenset())
    assert not is_generic(a, frozenset({a}))
    assert is_generic(a, frozenset({b}))
    b.bind(Function(a, INTEGER))
    assert not is_generic(a, frozenset({b}))


def test_fresh():
    a, b = TypeVariable(), TypeVariable()
    t = fresh(Function(a, a), frozenset())
    x, y = t.types
    assert x is y
    assert x is not a
    assert type(x) is TypeVariable

    t = fresh(Function(a, b), frozenset({b}))
    x, y = t.types
    assert x is not a
    assert y is b

    assert fresh(INTEGER, frozenset()) is INTEGER
    f = Function(INTEGER, b)
    assert fresh(f, frozenset({b})) is f


def test_get_type():
    env = frozendict({"x": BOOLEAN})
    assert get_type("x", env, frozenset()) is BOOLEAN
    assert get_type("42", env, frozenset()) is INTEGER
    assert get_type("-1", env, frozenset()) is INTEGER
    assert get_type(str(2 ** 63 - 1), env, frozenset()) is INTEGER
    assert get_type(str(-2 ** 63), env, frozenset()) is INTEGER
    for name in (str(2 ** 63), str(-2 ** 63 - 1), "99999999999999999999999"):
        try:
            get_type(name, env, frozenset())
            assert False, name
        except UndefinedSymbol as e:
            assert e.name == name
    try:
        get_type("unbound_name", env, frozenset())
        assert False
    except UndefinedSymbol as e:
        assert e.name == "unbound_name"


def test_extend_does_not_mutate():
    env = frozendict({"x": INTEGER})
    new_env = extend(env, "y", BOOLEAN)
    assert "y" not in env
    assert new_env["y"] is BOOLEAN and new_env["x"] is INTEGER
    assert extend(env, "x", BOOLEAN)["x"] is BOOLEAN
    assert env["x"] is INTEGER


def test_infer():
    def typ(term, env=None):
        return ExceptionMonad.ret(term) @ infer(..., env) @ str

    assert typ(app(lamb("x", "x"), "3")) == "int"
    assert typ(Let("id", lamb("x", "x"), app("id", "3"))) == "int"
    assert typ(Id("unbound_name"), {}) == UndefinedSymbol("unbound_name")
    assert typ(app("3", "3")) == TypeMismatch(Function(INTEGER, TypeVariable()), INTEGER)


def main():
    global TRACE
    argparser = ArgumentParser("hindley")
    argparser.add_argument("names", metavar="EXAMPLE", nargs="*",
                           help=f"One of {list(examples())}, default all")
    argparser.add_argument("--trace", action="store_true")
    args = argparser.parse_args()
    TRACE = args.trace

    programs = examples()
    for name in args.names or programs:
        if name not in programs:
            argparser.error(f"unknown example {name}")
        term = programs[name]
        try:
            print(f"{term} : {infer(term)}")
        except InferenceError as e:
            error(f"{term} : {e}")


if __name__ == "__main__":
    main()
