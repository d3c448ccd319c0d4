from typing import *

from hmtypes import (Type, TypeVariable, TypeOperator, Function, INTEGER, BOOLEAN,
                     InferenceError, Namer, prune, show_type)


class TypeMismatch(InferenceError):
    def __init__(self, left: Type, right: Type):
        namer = Namer()
        self.left = show_type(left, namer)
        self.right = show_type(right, namer)
        super().__init__(f"Type mismatch {self.left} != {self.right}")


class RecursiveUnification(InferenceError):
    def __init__(self, variable: TypeVariable, t: Type):
        namer = Namer()
        self.variable = show_type(variable, namer)
        self.type = show_type(t, namer)
        super().__init__(f"Recursive unification, {self.variable} occurs in {self.type}")


def occurs_in_type(v: TypeVariable, t: Type) -> bool:
    t = prune(t)
    if t is v:
        return True
    elif type(t) is TypeOperator:
        return occurs_in(v, t.types)
    return False


def occurs_in(v: TypeVariable, types: Iterable[Type]) -> bool:
    return any(occurs_in_type(v, t) for t in types)


def unify(t1: Type, t2: Type) -> None:
    a, b = prune(t1), prune(t2)
    if type(a) is TypeVariable:
        if a is not b:
            if occurs_in_type(a, b):
                raise RecursiveUnification(a, b)
            a.bind(b)
    elif type(b) is TypeVariable:
        unify(b, a)
    elif type(a) is TypeOperator and type(b) is TypeOperator:
        if a.name != b.name or len(a.types) != len(b.types):
            raise TypeMismatch(a, b)
        for x, y in zip(a.types, b.types):
            unify(x, y)
    else:
        assert False, f"invalid case {a!r} {b!r}"


def test_occurs_in_type():
    a, b = TypeVariable(), TypeVariable()
    assert occurs_in_type(a, a)
    assert not occurs_in_type(a, b)
    assert occurs_in_type(a, Function(INTEGER, a))
    assert not occurs_in_type(a, Function(INTEGER, b))
    b.bind(Function(a, INTEGER))
    assert occurs_in_type(a, b)
    assert occurs_in(a, [INTEGER, b])
    assert not occurs_in(a, [])


def test_unify_binds_variables():
    a, b = TypeVariable(), TypeVariable()
    unify(a, INTEGER)
    assert prune(a) is INTEGER
    unify(Function(b, BOOLEAN), Function(a, BOOLEAN))
    assert prune(b) is INTEGER
    c = TypeVariable()
    unify(c, c)
    assert c.instance is None


def test_unify_operator_on_the_left():
    a = TypeVariable()
    unify(BOOLEAN, a)
    assert prune(a) is BOOLEAN


def test_unify_mismatch():
    try:
        unify(INTEGER, BOOLEAN)
        assert False
    except TypeMismatch as e:
        assert (e.left, e.right) == ("int", "bool")

    try:
        unify(INTEGER, Function(TypeVariable(), TypeVariable()))
        assert False
    except TypeMismatch as e:
        assert (e.left, e.right) == ("int", "a -> b")
        assert str(e) == "Type mismatch int != a -> b"

    try:
        unify(TypeOperator("pair", (INTEGER,)), TypeOperator("pair", (INTEGER, INTEGER)))
        assert False
    except TypeMismatch as e:
        assert (e.left, e.right) == ("pair(int)", "pair(int, int)")


def test_unify_occurs_check():
    v = TypeVariable()
    for t in (Function(v, INTEGER), Function(INTEGER, v)):
        try:
            unify(v, t)
            assert False
        except RecursiveUnification as e:
            assert e.variable == "a"
            assert v.instance is None

    w = TypeVariable()
    w.bind(v)
    try:
        unify(Function(w, w), v)
        assert False
    except RecursiveUnification as e:
        assert str(e) == "Recursive unification, a occurs in a -> a"
