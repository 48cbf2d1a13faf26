"""Tests for the RBS recognizer."""
import pytest

from rbs_inline_lint.errors import RBSSyntaxError
from rbs_inline_lint.rbs import Parser, TypeParam


def parse_type(text):
    parser = Parser(text)
    parsed = parser.parse_type()
    parser.expect_end()
    return parsed


def parse_method_type(text):
    parser = Parser(text)
    parsed = parser.parse_method_type()
    parser.expect_end()
    return parsed


@pytest.mark.parametrize(
    "text",
    [
        "String",
        "Array[Integer]",
        "Hash[Symbol, String]",
        "String?",
        "Array[String]?",
        "Integer | String",
        "Integer & Comparable",
        "{ name: String, ?age: Integer }",
        "^(Integer) -> void",
        "^() -> void",
        "[Integer, String]",
        "singleton(Foo)",
        "::Foo::Bar",
        "_Each[Integer]",
        "1",
        ":sym",
        '"str"',
        "bool",
        "self?",
        "untyped",
    ],
)
def test_valid_types(text):
    assert parse_type(text) == text


@pytest.mark.parametrize(
    "text",
    [
        "() -> void",
        "(Integer, ?String) -> bool",
        "(*untyped, **untyped) -> void",
        "(name: String, ?age: Integer) -> void",
        "(Integer x) -> String",
        "(?) -> untyped",
        "() { (Integer) -> void } -> void",
        "() ?{ () -> void } -> void",
        "() [self: Foo] -> void",
        "[T] (T) -> T",
    ],
)
def test_valid_method_types(text):
    assert parse_method_type(text) == text


@pytest.mark.parametrize(
    "text, message, offset, length",
    [
        ("Hash[Symbol,", "unexpected end of input, expected a type", 12, 0),
        ("Array[Integer", "unexpected end of input, expected `]`", 13, 0),
        ("Array[]", "unexpected token `]`, expected a type", 6, 1),
        ("String String", "unexpected token `String`, expected end of input", 7, 6),
        ('"abc', "unterminated string literal", 0, 4),
    ],
)
def test_type_errors(text, message, offset, length):
    with pytest.raises(RBSSyntaxError) as excinfo:
        parse_type(text)

    assert excinfo.value.message == message
    assert excinfo.value.offset == offset
    assert excinfo.value.length == length


@pytest.mark.parametrize(
    "text, message, offset",
    [
        (
            "(name: String, Integer) -> void",
            "unexpected token `Integer`, expected a keyword parameter",
            15,
        ),
        ("(Integer) void", "unexpected token `void`, expected `->`", 10),
        ("() ->", "unexpected end of input, expected a type", 5),
    ],
)
def test_method_type_errors(text, message, offset):
    with pytest.raises(RBSSyntaxError) as excinfo:
        parse_method_type(text)

    assert excinfo.value.message == message
    assert excinfo.value.offset == offset


def test_error_offsets_are_bytes():
    with pytest.raises(RBSSyntaxError) as excinfo:
        parse_type('Hash["é", ')

    assert excinfo.value.offset == 11


def test_overloads_and_annotations():
    parser = Parser("%a{pure} (Integer) -> String | (String) -> String | ...")

    assert parser.parse_method_types() == ["(Integer) -> String", "(String) -> String"]
    assert parser.at_end()


def test_type_param():
    parser = Parser("unchecked out T < Comparable = Integer")

    assert parser.parse_type_param() == TypeParam("T", "out", True, "Comparable", "Integer")


def test_type_params_without_variance():
    parser = Parser("[out T]")

    with pytest.raises(RBSSyntaxError, match="expected a type parameter name"):
        parser.parse_type_params(allow_variance=False)


@pytest.mark.parametrize(
    "text, count",
    [
        ("type foo = Integer", 1),
        ("class Foo < Bar\n  def baz: () -> void\nend", 1),
        ("module M : BasicObject\nend", 1),
        ("interface _Each[T]\n  def each: () { (T) -> void } -> void\nend", 1),
        ("attr_reader name: String\ndef foo: () -> void", 2),
        ("@name: String\nself.@count: Integer", 2),
        ("Foo::VERSION: String\n$stdout: IO", 2),
        ("use Foo::Bar as Baz, Foo::*", 1),
        ("%a{pure} def foo: () -> void", 1),
        ("", 0),
    ],
)
def test_declarations(text, count):
    parser = Parser(text)

    assert parser.parse_declarations() == count


@pytest.mark.parametrize(
    "text, message",
    [
        ("type foo = ", "unexpected end of input, expected a type"),
        ("class Foo\n  def bar: () -> void\n", "unexpected end of input, expected `end`"),
        ("-> void", "unexpected token `->`, expected a declaration or member"),
    ],
)
def test_declaration_errors(text, message):
    with pytest.raises(RBSSyntaxError) as excinfo:
        Parser(text).parse_declarations()

    assert excinfo.value.message == message


def test_annotation_payloads():
    assert Parser("BasicObject, _Each[String]").parse_self_types() == [
        "BasicObject",
        "_Each[String]",
    ]
    assert Parser("Foo[T] < Bar[T]").parse_class_head() == "Foo[T] < Bar[T]"
    assert Parser("Enumerable : _Each[T]").parse_module_head() == "Enumerable : _Each[T]"
    assert Parser("[Integer, String]").parse_type_list() == ["Integer", "String"]
