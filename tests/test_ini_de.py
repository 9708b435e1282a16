import enum
from dataclasses import dataclass, field
from typing import Optional

import pytest

from alpmfiles.ini import IniError
from alpmfiles.ini_de import IniDeserializeError, from_str


@dataclass
class TestModel:
    builddate: int
    builddir: str
    buildenv: list[str]
    format: str
    installed: list[str]
    options: list[str]
    packager: str
    pkgarch: str
    pkgbase: str
    pkgbuild_sha256sum: str
    pkgname: str
    pkgver: str


TEST_INPUT = """
        builddate = 1
        builddir = /build
        buildenv = envfoo
        buildenv = envbar
        format = 1
        installed = bar-1.2.3-1-any
        installed = beh-2.2.3-4-any
        options = some_option
        options = !other_option
        options = !other_optionaaaaa
        packager = Foobar McFooface <foobar@example.com>
        pkgarch = any
        pkgbase = foo
        pkgbuild_sha256sum = b5bb9d8014a0f9b1d61e21e796d78dccdf1352f23cd32812f4850b878ae4944c
        pkgname = foo
        pkgver = 1:1.0.0-1"""


def test_deserialize():
    assert from_str(TEST_INPUT, TestModel) == TestModel(
        builddate=1,
        builddir="/build",
        buildenv=["envfoo", "envbar"],
        format="1",
        installed=["bar-1.2.3-1-any", "beh-2.2.3-4-any"],
        options=["some_option", "!other_option", "!other_optionaaaaa"],
        packager="Foobar McFooface <foobar@example.com>",
        pkgarch="any",
        pkgbase="foo",
        pkgbuild_sha256sum="b5bb9d8014a0f9b1d61e21e796d78dccdf1352f23cd32812f4850b878ae4944c",
        pkgname="foo",
        pkgver="1:1.0.0-1",
    )


@dataclass
class TypeTestModel:
    i64: int
    i32: int
    u64: int
    u32: int
    list: list[str]
    u64_list: list[int]
    bool: bool


TYPE_TEST_INPUT = """
        i64 = -64
        i32 = -32
        u64 = 64
        u32 = 32
        list = a
        list = b
        list = c
        u64_list = 1
        u64_list = 2
        u64_list = 3
        bool = true"""


def test_deserialize_types():
    assert from_str(TYPE_TEST_INPUT, TypeTestModel) == TypeTestModel(
        i64=-64,
        i32=-32,
        u64=64,
        u32=32,
        list=["a", "b", "c"],
        u64_list=[1, 2, 3],
        bool=True,
    )


@dataclass
class FlattenTestModelInner:
    u64_list: list[int]
    u64: int


@dataclass
class FlattenTestModel:
    flattened: FlattenTestModelInner


FLATTEN_TEST_INPUT = """
        u64 = 42
        u64_list = 1"""


def test_deserialize_with_nested_model():
    assert from_str(FLATTEN_TEST_INPUT, FlattenTestModelInner) == FlattenTestModelInner(
        u64_list=[1], u64=42
    )
    with pytest.raises(IniDeserializeError, match="missing field `flattened`"):
        from_str(FLATTEN_TEST_INPUT, FlattenTestModel)


@dataclass
class Simple:
    name: str
    count: int


def test_missing_field():
    with pytest.raises(IniDeserializeError, match="missing field `count`"):
        from_str("name = foo", Simple)


def test_unknown_keys_are_ignored():
    assert from_str("name = foo\ncount = 3\nextra = x", Simple) == Simple("foo", 3)


def test_duplicate_string_field():
    with pytest.raises(IniDeserializeError, match="expected a string"):
        from_str("name = foo\nname = bar\ncount = 1", Simple)


def test_duplicate_integer_field():
    with pytest.raises(IniError, match="internal consistency error"):
        from_str("name = foo\ncount = 1\ncount = 2", Simple)


@pytest.mark.parametrize(
    ("value", "message"),
    [
        ("abc", "invalid digit found in string"),
        ("1.5", "invalid digit found in string"),
        ("", "cannot parse integer from empty string"),
    ],
)
def test_invalid_integer(value, message):
    with pytest.raises(IniDeserializeError, match=message):
        from_str(f"name = foo\ncount = {value}", Simple)


@dataclass
class Flags:
    enabled: bool
    ratio: float


def test_invalid_bool():
    with pytest.raises(IniDeserializeError, match="`true` or `false`"):
        from_str("enabled = yes\nratio = 1.0", Flags)


def test_float_values():
    assert from_str("enabled = false\nratio = 2.5", Flags) == Flags(False, 2.5)


def test_invalid_float():
    with pytest.raises(IniDeserializeError, match="invalid float literal"):
        from_str("enabled = false\nratio = 1_0", Flags)


@dataclass
class WithDefaults:
    name: str
    tags: list[str] = field(default_factory=list)
    note: Optional[str] = None
    level: int = 7


def test_defaults_for_absent_fields():
    assert from_str("name = foo", WithDefaults) == WithDefaults("foo", [], None, 7)


def test_single_value_for_list_field():
    result = from_str("name = foo\ntags = one\nnote = hi", WithDefaults)
    assert result.tags == ["one"]
    assert result.note == "hi"


@dataclass
class OptionalNoDefault:
    note: Optional[int]


def test_optional_without_default_becomes_none():
    assert from_str("", OptionalNoDefault) == OptionalNoDefault(None)
    assert from_str("note = 5", OptionalNoDefault) == OptionalNoDefault(5)


class Arch(enum.Enum):
    ANY = "any"
    X86_64 = "x86_64"


@dataclass
class WithEnum:
    arch: Arch
    arches: list[Arch]


def test_custom_type_conversion():
    result = from_str("arch = any\narches = any\narches = x86_64", WithEnum)
    assert result == WithEnum(Arch.ANY, [Arch.ANY, Arch.X86_64])


def test_custom_type_conversion_error():
    with pytest.raises(IniDeserializeError, match="not a valid Arch"):
        from_str("arch = sparc\narches = any", WithEnum)


def test_parse_error_is_wrapped():
    with pytest.raises(IniDeserializeError, match="invalid delimiter"):
        from_str("name=foo", Simple)


def test_model_must_be_dataclass():
    with pytest.raises(TypeError):
        from_str("name = foo", dict)