from typing import *
from itertools import count
from string import ascii_lowercase
from dataclasses import dataclass
from functools import partial

# Types are compared by identity, a TypeVariable is a mutable cell
dataclass = partial(dataclass, eq=False)  # type: ignore


class InferenceError(TypeError):
    "Base class of every failure raised while inferring a type"


class Type:
    def __str__(self):
        return show_type(self)


_ids = count()


@dataclass
class TypeVariable(Type):
    id: int = -1
    instance: Optional[Type] = None
    # display label, stored by name_variables
    name: Optional[str] = None

    def __post_init__(self):
        if self.id < 0:
            self.id = next(_ids)

    def bind(self, t: Type) -> None:
        assert self.instance is None, f"{self!r} is already bound"
        self.instance = t

    def __repr__(self):
        return f"TypeVariable({self.id})"


@dataclass
class TypeOperator(Type):
    name: str
    types: Tuple[Type, ...] = ()

    def __post_init__(self):
        self.types = tuple(self.types)

    def __repr__(self):
        return f"TypeOperator({self.name!r}, {list(self.types)!r})"


def Function(arg: Type, result: Type) -> TypeOperator:
    return TypeOperator("->", (arg, result))


INTEGER = TypeOperator("int")
BOOLEAN = TypeOperator("bool")


def is_function(t: Type) -> bool:
    return type(t) is TypeOperator and t.name == "->" and len(t.types) == 2


def prune(t: Type) -> Type:
    """
    Returns the representative of `t`, following the bindings of type
    variables. Every variable visited is rebound straight to the
    representative, so the next lookup is a single step.
    """
    if type(t) is TypeVariable and t.instance is not None:
        t.instance = prune(t.instance)
        return t.instance
    return t


class Namer:
    "Gives letters to type variables in the order they are first shown"

    def __init__(self):
        self.names: Dict[int, str] = {}

    def __call__(self, v: TypeVariable) -> str:
        if v.name is not None:
            return v.name
        if v.id not in self.names:
            n, i = divmod(len(self.names), len(ascii_lowercase))
            self.names[v.id] = ascii_lowercase[i] + (str(n) if n else "")
        return self.names[v.id]


def show_type(t: Type, namer: Optional[Namer] = None) -> str:
    namer = Namer() if namer is None else namer
    t = prune(t)
    if type(t) is TypeVariable:
        return namer(t)
    elif is_function(t):
        arg, result = t.types
        left = show_type(arg, namer)
        if is_function(prune(arg)):
            left = f"({left})"
        return f"{left} -> {show_type(result, namer)}"
    elif type(t) is TypeOperator:
        if not t.types:
            return t.name
        args = ", ".join(show_type(x, namer) for x in t.types)
        return f"{t.name}({args})"
    else:
        assert False, f"invalid type {t!r}"


def name_variables(t: Type, namer: Namer) -> Type:
    "Stores a label on each unnamed variable of `t`, in the order show_type meets them"
    t = prune(t)
    if type(t) is TypeVariable:
        if t.name is None:
            t.name = namer(t)
    elif type(t) is TypeOperator:
        for x in t.types:
            name_variables(x, namer)
    return t


def test_prune():
    a, b, c = TypeVariable(), TypeVariable(), TypeVariable()
    assert prune(a) is a
    assert prune(INTEGER) is INTEGER
    a.bind(b)
    b.bind(c)
    c.bind(INTEGER)
    assert prune(a) is INTEGER
    assert prune(a) is INTEGER
    # path compression
    assert a.instance is INTEGER
    assert b.instance is INTEGER


def test_prune_is_idempotent():
    a, b = TypeVariable(), TypeVariable()
    a.bind(b)
    assert prune(a) is b
    assert prune(prune(a)) is prune(a)
    f = Function(a, b)
    assert prune(f) is f


def test_bind_is_write_once():
    a = TypeVariable()
    a.bind(INTEGER)
    try:
        a.bind(BOOLEAN)
        assert False
    except AssertionError as e:
        assert "already bound" in str(e)


def test_fresh_variables_are_distinct():
    a, b = TypeVariable(), TypeVariable()
    assert a != b
    assert a.id < b.id
    assert len({a, b}) == 2


def test_show_type():
    a, b = TypeVariable(), TypeVariable()
    assert str(INTEGER) == "int"
    assert str(Function(INTEGER, BOOLEAN)) == "int -> bool"
    assert str(Function(a, Function(b, a))) == "a -> b -> a"
    assert str(Function(Function(a, b), a)) == "(a -> b) -> a"
    assert str(TypeOperator("pair", (b, a))) == "pair(a, b)"
    a.bind(BOOLEAN)
    assert str(Function(a, b)) == "bool -> a"


def test_namer():
    namer = Namer()
    vs = [TypeVariable() for _ in range(28)]
    names = [namer(v) for v in vs]
    assert names[:3] == ["a", "b", "c"]
    assert names[25] == "z"
    assert names[26:] == ["a1", "b1"]
    assert namer(vs[0]) == "a"


def test_name_variables():
    a, b = TypeVariable(), TypeVariable()
    t = Function(b, Function(a, b))
    name_variables(t, Namer())
    assert (b.name, a.name) == ("a", "b")
    assert str(t.types[1]) == "b -> a"
    assert str(a) == "b"
    # labels are stored once
    name_variables(Function(a, b), Namer())
    assert (b.name, a.name) == ("a", "b")
