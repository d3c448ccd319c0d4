from functools import reduce
from fphack import adt


Term, Id, Lambda, Apply, Let, Letrec = adt("Term",
    "Id name",
    "Lambda param body",
    "Apply function argument",
    "Let name definition body",
    "Letrec name definition body")


def show_term(t):
    assert isinstance(t, Term)
    if type(t) is Id:
        return t.name
    elif type(t) is Lambda:
        return f"(fn {t.param} => {show_term(t.body)})"
    elif type(t) is Apply:
        return f"({show_term(t.function)} {show_term(t.argument)})"
    elif type(t) is Let:
        return f"(let {t.name} = {show_term(t.definition)} in {show_term(t.body)})"
    elif type(t) is Letrec:
        return f"(letrec {t.name} = {show_term(t.definition)} in {show_term(t.body)})"
    else:
        assert False, f"invalid term {t!r}"

Term.__str__ = show_term


def _term(x):
    return Id(x) if type(x) is str else x


def lamb(*args):
    "construct multi arguments lambdas, lamb('x', 'y', body)"
    *params, body = args
    return reduce(lambda body, param: Lambda(param, body),
                  reversed(params), _term(body))


def app(*args):
    "construct multi arguments applications, app(f, a, b) is ((f a) b)"
    f, *args = (_term(arg) for arg in args)
    return reduce(Apply, args, f)


def test_builders():
    assert lamb("x", "x") == Lambda("x", Id("x"))
    assert lamb("x", "y", "x") == Lambda("x", Lambda("y", Id("x")))
    assert app("f", "x") == Apply(Id("f"), Id("x"))
    assert app("f", "x", "y") == Apply(Apply(Id("f"), Id("x")), Id("y"))
    assert app(lamb("x", "x"), "3") == Apply(Lambda("x", Id("x")), Id("3"))


def test_show_term():
    assert str(Id("x")) == "x"
    assert str(lamb("x", "y", app("x", "y"))) == "(fn x => (fn y => (x y)))"
    assert str(Let("id", lamb("x", "x"), app("id", "3"))) == \
        "(let id = (fn x => x) in (id 3))"
    assert str(Letrec("f", lamb("n", app("f", "n")), Id("f"))) == \
        "(letrec f = (fn n => (f n)) in f)"


def test_terms_are_immutable_values():
    assert Id("x") == Id("x")
    assert Id("x") != Id("y")
    assert isinstance(Let("x", Id("1"), Id("x")), Term)
    assert hash(lamb("x", "x")) == hash(lamb("x", "x"))
