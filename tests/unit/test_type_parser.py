"""
Tests for the frontend: type notation and snippet parsing.
"""

import pytest
from assertnarrow.frontend.parser import ParseError
from assertnarrow.shared.errors import ErrorCode
from assertnarrow.shared.nodes import (
    Array_, AssertType, ClassConstFetch, ConstFetch, Declaration, DumpType, ExpressionStatement,
    FuncCall, LNumber, StaticCall, String_, Variable,
)
from assertnarrow.shared.types import (
    ArrayType, ClassStringType, ConstantArrayType, ConstantIntegerType, ConstantStringType,
    IntegerRangeType, IterableType, ObjectType, UnionType,
    BOOL, FLOAT, INT, MIXED, NEVER, NON_EMPTY_STRING, NULL, STRING, TRUE,
)
from assertnarrow.shared.type_combinator import TypeCombinator


class TestTypeNotation:
    """PHPDoc-style type notation"""

    @pytest.mark.parametrize("notation, expected", [
        ("int", INT),
        ("Int", INT),
        ("mixed", MIXED),
        ("never", NEVER),
        ("non-empty-string", NON_EMPTY_STRING),
        ("true", TRUE),
        ("bool", BOOL),
        ("'foo'", ConstantStringType("foo")),
        ('"it\'s"', ConstantStringType("it's")),
        ("42", ConstantIntegerType(42)),
        ("-1", ConstantIntegerType(-1)),
        ("Foo", ObjectType("Foo")),
        ("\\Foo\\Bar", ObjectType("Foo\\Bar")),
        ("class-string", ClassStringType()),
        ("class-string<Foo>", ClassStringType("Foo")),
        ("positive-int", IntegerRangeType(1, None)),
        ("int<0, max>", IntegerRangeType(0, None)),
        ("int<min, -1>", IntegerRangeType(None, -1)),
        ("int<3, 3>", ConstantIntegerType(3)),
        ("int<5, 1>", NEVER),
        ("array<int, string>", ArrayType(INT, STRING)),
        ("array<string>", ArrayType(TypeCombinator.union(INT, STRING), STRING)),
        ("list<string>", ArrayType(INT, STRING, is_list=True)),
        ("non-empty-list<string>", ArrayType(INT, STRING, is_list=True, is_non_empty=True)),
        ("non-empty-array<string, int>", ArrayType(STRING, INT, is_non_empty=True)),
        ("iterable<string>", IterableType(MIXED, STRING)),
        ("iterable<int, float>", IterableType(INT, FLOAT)),
        ("array{}", ConstantArrayType((), ())),
    ])
    def test_parse(self, parser, notation, expected):
        assert parser.parse_type(notation) == expected

    def test_union_is_order_independent(self, parser):
        assert parser.parse_type("string|int|null") == parser.parse_type("null|int|string")
        assert isinstance(parser.parse_type("string|int|null"), UnionType)

    def test_union_subsumes_members(self, parser):
        assert parser.parse_type("int|positive-int") == INT
        assert parser.parse_type("true|false") == BOOL
        assert parser.parse_type("string|mixed") == MIXED

    def test_parenthesised_union(self, parser):
        assert parser.parse_type("list<(int|null)>") == ArrayType(INT, TypeCombinator.union(INT, NULL), is_list=True)

    def test_array_shape(self, parser):
        shape = parser.parse_type("array{id: int, 'full name'?: string, 5: bool, null}")
        assert shape.key_types == (
            ConstantStringType("id"), ConstantStringType("full name"),
            ConstantIntegerType(5), ConstantIntegerType(6),
        )
        assert shape.value_types == (INT, STRING, BOOL, NULL)
        assert shape.optional_keys == (False, True, False, False)

    def test_positional_shape_entries(self, parser):
        assert parser.parse_type("array{string, int}") == parser.parse_type("array{0: string, 1: int}")

    def test_describe_round_trips(self, parser):
        for notation in ("array{id: int, name?: string}", "non-empty-list<int<1, max>>", "iterable<int, Foo>"):
            assert parser.parse_type(str(parser.parse_type(notation))) == parser.parse_type(notation)

    @pytest.mark.parametrize("notation", [
        "map<int>",
        "list<int, string>",
        "int<foo, 3>",
        "Foo{id: int}",
        "class-string<int>",
    ])
    def test_invalid_notation(self, parser, notation):
        with pytest.raises(ParseError) as info:
            parser.parse_type(notation)
        assert info.value.error_code == ErrorCode.INVALID_TYPE.value
        assert "Invalid type notation" in info.value.message

    @pytest.mark.parametrize("notation", ["int|", "array<int", "", "$a"])
    def test_syntax_errors_in_notation(self, parser, notation):
        with pytest.raises(ParseError) as info:
            parser.parse_type(notation)
        assert info.value.error_code == ErrorCode.INVALID_TYPE.value


class TestSnippetParsing:
    """Analysis snippets: declarations, assertion calls, checks"""

    SOURCE = (
        "// a snippet\n"
        "$a: string|null;\n"
        "Assert::nullOrString($a, 'message');\n"
        "assertType('string|null', $a);\n"
        "dumpType($a);\n"
    )

    def test_statements(self, parser):
        program = parser.parse(self.SOURCE, "snippet.nrw")
        kinds = [type(statement) for statement in program.statements]
        assert kinds == [Declaration, ExpressionStatement, AssertType, DumpType]
        assert program.source_file == "snippet.nrw"

    def test_statement_contents(self, parser):
        declaration, call, check, dump = parser.parse(self.SOURCE).statements
        assert declaration.variable == Variable("a")
        assert declaration.declared_type == parser.parse_type("string|null")
        assert isinstance(call.expr, StaticCall)
        assert call.expr.method == "nullOrString"
        assert str(call.expr) == "Assert::nullOrString($a, 'message')"
        assert check.expected == "string|null"
        assert dump.expr == Variable("a")

    def test_locations(self, parser):
        statements = parser.parse(self.SOURCE, "snippet.nrw").statements
        assert [s.location.line for s in statements] == [2, 3, 4, 5]
        assert statements[1].location.column == 1
        assert str(statements[1].location) == "snippet.nrw:3:1"

    def test_expressions(self, parser):
        source = "f($a, 'x', -3, null, true, Foo::class, [1, 'k' => $b], \\Vendor\\Assert::same($a, $b));"
        (statement,) = parser.parse(source).statements
        call = statement.expr
        assert isinstance(call, FuncCall)
        values = [arg.value for arg in call.args]
        assert values[0] == Variable("a")
        assert values[1] == String_("x")
        assert values[2] == LNumber(-3)
        assert isinstance(values[3], ConstFetch) and values[3].name.lower() == "null"
        assert isinstance(values[5], ClassConstFetch)
        assert isinstance(values[6], Array_)
        assert str(values[6]) == "[1, 'k' => $b]"
        assert isinstance(values[7], StaticCall)
        assert str(values[7].class_name) == "\\Vendor\\Assert"

    def test_keyword_method_names(self, parser):
        source = "Assert::null($a); Assert::true($b); Assert::false($c);"
        methods = [statement.expr.method for statement in parser.parse(source).statements]
        assert methods == ["null", "true", "false"]

    def test_empty_snippet(self, parser):
        assert parser.parse("# nothing here\n").statements == ()

    def test_syntax_error_has_location(self, parser):
        with pytest.raises(ParseError) as info:
            parser.parse("$a: int;\nAssert::string($a\n", "broken.nrw")
        error = info.value
        assert error.error_code == ErrorCode.SYNTAX_ERROR.value
        assert error.location is not None
        assert error.location.file == "broken.nrw"
        assert error.location.line >= 2
