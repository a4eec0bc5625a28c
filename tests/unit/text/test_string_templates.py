from __future__ import annotations

import pytest

from oddments.core.exceptions import VariableNotFoundError
from oddments.core.text.templates import (
    UnixShellStringTemplate,
    Variable,
    WindowsCmdStringTemplate,
)

RESOLVER = {"a": "alpha", "foo": "FOOBAR"}

UNIX_CASES = [
    (r"${a} $foo ${b?bdef} $b ${foo}\$x", "alpha FOOBAR bdef  FOOBAR$x", True),
    (r"\$a $foo $b", "$a FOOBAR ", True),
    ("$a", "alpha", False),
]

WINDOWS_CASES = [
    (r"%a% %foo% %b% %foo%\%x", "alpha FOOBAR  FOOBAR%x", True),
    (r"\%a% %foo% %b%", "%a% FOOBAR ", True),
    ("%a%", "alpha", False),
]


@pytest.mark.parametrize(
    "template_class, cases",
    [(UnixShellStringTemplate, UNIX_CASES), (WindowsCmdStringTemplate, WINDOWS_CASES)],
)
def test_safe_expansion(template_class, cases) -> None:
    template = template_class(RESOLVER, safe=True)
    for string, expected, _has_missing in cases:
        assert template.substitute(string) == expected


@pytest.mark.parametrize(
    "template_class, cases",
    [(UnixShellStringTemplate, UNIX_CASES), (WindowsCmdStringTemplate, WINDOWS_CASES)],
)
def test_unsafe_expansion(template_class, cases) -> None:
    template = template_class(RESOLVER, safe=False)
    for string, expected, has_missing in cases:
        if has_missing:
            with pytest.raises(VariableNotFoundError) as exc:
                template.substitute(string)
            assert exc.value.name == "b"
            assert isinstance(exc.value, KeyError)
        else:
            assert template.substitute(string) == expected


def test_default_applies_in_unsafe_mode() -> None:
    template = UnixShellStringTemplate({}, safe=False)

    assert template.substitute("${missing?fallback}") == "fallback"
    assert template.substitute("[${missing?}]") == "[]"


def test_values_are_not_rescanned() -> None:
    template = UnixShellStringTemplate({"a": "$b", "b": "never"})

    assert template.substitute("$a") == "$b"


def test_non_string_values_are_stringified() -> None:
    assert WindowsCmdStringTemplate({"n": 3}).substitute("n=%n%") == "n=3"


def test_find_variable_ref() -> None:
    template = UnixShellStringTemplate(RESOLVER)

    assert template.find_variable_ref("x ${foo?dflt} $a") == Variable(2, 13, "foo", "dflt")
    assert template.find_variable_ref("say $a") == Variable(4, 6, "a")
    assert template.find_variable_ref("nothing here") is None
    assert str(Variable(0, 2, "a")) == "a"


def test_custom_variable_pattern() -> None:
    template = UnixShellStringTemplate({"a.b": "dotted"}, var_pattern=r"[a-z.]+")

    assert template.substitute("${a.b}!") == "dotted!"


def test_safe_mode_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ODDMENTS_TEMPLATES__SAFE", "false")

    template = UnixShellStringTemplate({})

    assert template.safe is False
    with pytest.raises(VariableNotFoundError):
        template.substitute("$x")
