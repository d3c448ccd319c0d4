"""
Type signatures, used to write environments and expected types:

    int, bool, list(a)     type operators
    a, b, a1               type variables, shared inside one signature
    a -> b -> a            functions, right associative
"""
import re
from typing import *
from lark import Lark, Transformer as LarkTransformer
from lark.exceptions import LarkError

from hmtypes import Type, TypeVariable, TypeOperator, Function, INTEGER, BOOLEAN, show_type

grammar = r"""
    start : type_

    ?type_ : operand "->" type_ -> function
           | operand
    ?operand : NAME "(" type_ ("," type_)* ")" -> operator
             | NAME -> name
             | "(" type_ ")"

    NAME : /[a-z_][a-z0-9_]*/i

    %import common.WS
    %ignore WS
"""

signature_parser = Lark(grammar, parser="lalr")

VARIABLE = re.compile(r"[a-z][0-9]*")
CONSTANTS = {"int": INTEGER, "bool": BOOLEAN}


class SignatureError(ValueError): ...


class Transformator(LarkTransformer):
    def __init__(self):
        super().__init__()
        self.variables: Dict[str, TypeVariable] = {}

    def start(self, tree):
        return tree[0]

    def function(self, tree):
        arg, result = tree
        return Function(arg, result)

    def operator(self, tree):
        name, *types = tree
        return TypeOperator(name.value, types)

    def name(self, tree):
        name = tree[0].value
        if name in CONSTANTS:
            return CONSTANTS[name]
        elif VARIABLE.fullmatch(name):
            if name not in self.variables:
                self.variables[name] = TypeVariable()
            return self.variables[name]
        return TypeOperator(name)


def signature(text: str) -> Type:
    try:
        tree = signature_parser.parse(text)
    except LarkError as e:
        raise SignatureError(f"Invalid type signature {text!r}: {e}") from e
    return Transformator().transform(tree)


def test_signature_constants():
    assert signature("int") is INTEGER
    assert signature("bool") is BOOLEAN
    assert show_type(signature("unit")) == "unit"


def test_signature_arrows():
    assert show_type(signature("int -> bool")) == "int -> bool"
    assert show_type(signature("int -> int -> bool")) == "int -> int -> bool"
    assert show_type(signature("(int -> int) -> bool")) == "(int -> int) -> bool"
    t = signature("int -> int -> bool")
    assert t.types[0] is INTEGER
    assert t.types[1].name == "->"


def test_signature_variables_are_shared():
    t = signature("bool -> a -> a -> a")
    assert show_type(t) == "bool -> a -> a -> a"
    _, rest = t.types
    a, rest = rest.types
    assert type(a) is TypeVariable
    assert rest.types[0] is a and rest.types[1] is a
    assert signature("a") is not signature("a")


def test_signature_operators():
    t = signature("a -> b -> pair(a, b)")
    assert show_type(t) == "a -> b -> pair(a, b)"
    assert show_type(signature("list(int -> a)")) == "list(int -> a)"


def test_signature_errors():
    for text in ("", "int ->", "-> int", "pair(", "(int"):
        try:
            signature(text)
            assert False, text
        except SignatureError:
            pass
