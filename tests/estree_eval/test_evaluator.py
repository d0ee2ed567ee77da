"""
Tests for the expression evaluator.
"""

import logging
import math
from types import MappingProxyType

import pytest

from estree_eval import (
    UNDEFINED,
    ArrayExpression,
    ArrowFunctionExpression,
    BinaryExpression,
    Closure,
    EvaluationError,
    ExpressionError,
    Identifier,
    InvalidOperator,
    Literal,
    LogicalExpression,
    MemberExpression,
    NativeFunction,
    OpaqueNode,
    RECOGNIZED_NODE_KINDS,
    RestElement,
    Scope,
    Super,
    TemplateElement,
    TemplateLiteral,
    TypeError as ExprTypeError,
    UnaryExpression,
    UnsupportedConstruct,
    UnsupportedNodeKind,
    create_global_scope,
    evaluate,
    evaluate_expression,
    parse,
    try_evaluate,
)


def eval_expr(expression, bindings=None):
    """Helper to parse and evaluate an expression against a plain scope."""
    scope = bindings if bindings is not None else {}
    return evaluate(parse(expression), scope, expression)


class TestLiterals:
    """Tests for literal and identifier evaluation."""

    def test_evaluates_literals(self):
        assert eval_expr("42") == 42
        assert eval_expr("'hello'") == "hello"
        assert eval_expr("true") is True
        assert eval_expr("null") is None

    def test_resolves_identifiers(self):
        assert eval_expr("a", {"a": 5}) == 5

    def test_unresolved_identifiers_are_undefined(self):
        assert eval_expr("missing") is UNDEFINED
        assert eval_expr("undefined") is UNDEFINED

    def test_regex_literals_are_fresh_per_evaluation(self):
        ast = parse("/a/g")
        first = evaluate(ast, {})
        second = evaluate(ast, {})
        assert first is not second
        assert first.flags == "g"

    def test_recognized_node_kinds(self):
        assert len(RECOGNIZED_NODE_KINDS) == 12
        assert "TemplateLiteral" in RECOGNIZED_NODE_KINDS
        assert "ThisExpression" not in RECOGNIZED_NODE_KINDS


class TestEquality:
    """Tests for equality operators."""

    def test_strict_equality(self):
        assert eval_expr("1 === 0") is False
        assert eval_expr("0 === 0") is True
        assert eval_expr("1 !== 0") is True
        assert eval_expr("'1' === 1") is False

    def test_loose_equality(self):
        assert eval_expr('0 == "0"') is True
        assert eval_expr("null == undefined") is True
        assert eval_expr("null == 0") is False
        assert eval_expr('"" == 0') is True
        assert eval_expr('"1" == true') is True
        assert eval_expr("[1] == 1") is True

    def test_loose_inequality_is_negated_equality(self):
        assert eval_expr('1 != "1"') is False
        assert eval_expr("null != undefined") is False
        assert eval_expr("1 != 2") is True

    def test_objects_compare_by_identity(self):
        shared = {}
        assert eval_expr("a === b", {"a": shared, "b": shared}) is True
        assert eval_expr("a == b", {"a": {}, "b": {}}) is False


class TestArrays:
    """Tests for array evaluation and spread."""

    def test_empty_array(self):
        assert eval_expr("[]") == []

    def test_array_elements(self):
        assert eval_expr("[1, 2, 3]") == [1, 2, 3]

    def test_spread_in_arrays(self):
        assert eval_expr("[1, 2, 3, ...[4, 5, 6]]") == [1, 2, 3, 4, 5, 6]

    def test_spread_strings(self):
        assert eval_expr('[..."ab"]') == ["a", "b"]

    def test_spread_python_iterables(self):
        assert eval_expr("[...r]", {"r": range(3)}) == [0, 1, 2]

    def test_spread_non_iterable_raises(self):
        with pytest.raises(ExprTypeError, match="1 is not iterable"):
            eval_expr("[...1]")

    def test_spread_mapping_raises(self):
        with pytest.raises(ExprTypeError, match="is not iterable"):
            eval_expr("[...o]", {"o": {"a": 1}})

    def test_holes_are_undefined(self):
        assert eval_expr("[1, , 3]") == [1, UNDEFINED, 3]

    def test_arrays_are_fresh_lists(self):
        ast = parse("[1]")
        assert evaluate(ast, {}) is not evaluate(ast, {})


class TestMembers:
    """Tests for member access."""

    def test_string_length(self):
        assert eval_expr("a.length", {"a": "xyz"}) == 3

    def test_number_method_with_argument(self):
        assert eval_expr("a.toString(2)", {"a": 8}) == "1000"

    def test_number_method_with_spread_argument(self):
        assert eval_expr("a.toString(...[2])", {"a": 8}) == "1000"

    def test_regex_method_call(self):
        assert eval_expr("/abc/.test('abcdefg')") is True

    def test_nested_members(self):
        assert eval_expr("a.b.c", {"a": {"b": {"c": 1}}}) == 1

    def test_computed_members(self):
        assert eval_expr('a["b"]', {"a": {"b": 2}}) == 2
        assert eval_expr("a[k]", {"a": {"b": 2}, "k": "b"}) == 2

    def test_array_index(self):
        assert eval_expr("a[0]", {"a": [5]}) == 5
        assert eval_expr('a["0"]', {"a": [5]}) == 5
        assert eval_expr("a[5]", {"a": [5]}) is UNDEFINED
        assert eval_expr("a[1.5]", {"a": [5, 6]}) is UNDEFINED

    def test_string_index(self):
        assert eval_expr('"abc"[1]') == "b"

    def test_missing_property_is_undefined(self):
        assert eval_expr("a.b", {"a": {}}) is UNDEFINED

    def test_numeric_keys_in_mappings(self):
        assert eval_expr("m[1]", {"m": {1: "one"}}) == "one"

    def test_host_object_attributes(self):
        class Point:
            def __init__(self):
                self.x = 3

        assert eval_expr("p.x", {"p": Point()}) == 3
        assert eval_expr("p.__class__", {"p": Point()}) is UNDEFINED

    def test_reading_from_null_raises(self):
        with pytest.raises(ExprTypeError, match=r"Cannot read properties of null \(reading 'x'\)"):
            eval_expr("null.x")

    def test_reading_from_undefined_raises(self):
        with pytest.raises(ExprTypeError, match="Cannot read properties of undefined"):
            eval_expr("a.b.c", {"a": {}})


class TestCalls:
    """Tests for function calls and receivers."""

    def test_python_callables(self):
        assert eval_expr("add(1, 2)", {"add": lambda a, b: a + b}) == 3

    def test_spread_arguments(self):
        assert eval_expr("f(...[1, 2], 3)", {"f": lambda *a: list(a)}) == [1, 2, 3]

    def test_method_receives_receiver(self):
        who = NativeFunction("who", lambda this: this)
        obj = {"who": who}
        assert eval_expr("o.who()", {"o": obj}) is obj

    def test_plain_call_has_undefined_receiver(self):
        who = NativeFunction("who", lambda this: this)
        assert eval_expr("f()", {"f": who}) is UNDEFINED

    def test_member_object_evaluated_once(self):
        calls = []

        def get():
            calls.append(1)
            return {"m": lambda: "ok"}

        assert eval_expr("get().m()", {"get": get}) == "ok"
        assert len(calls) == 1

    def test_host_methods(self):
        class Counter:
            def __init__(self):
                self.count = 0

            def bump(self, by):
                self.count += by
                return self.count

        counter = Counter()
        assert eval_expr("c.bump(2)", {"c": counter}) == 2
        assert counter.count == 2

    def test_calling_non_function_raises(self):
        with pytest.raises(ExprTypeError, match="a is not a function"):
            eval_expr("a()", {"a": 1})

    def test_calling_missing_method_raises(self):
        with pytest.raises(ExprTypeError, match="a.b is not a function"):
            eval_expr("a.b()", {"a": {}})

    def test_host_exceptions_propagate(self):
        def fail():
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            eval_expr("fail()", {"fail": fail})

    def test_arguments_evaluated_left_to_right(self):
        order = []

        def mark(value):
            order.append(value)
            return value

        eval_expr("f(mark(1), mark(2), mark(3))", {"f": lambda *a: None, "mark": mark})
        assert order == [1, 2, 3]


class TestUnary:
    """Tests for unary operators."""

    def test_not(self):
        assert eval_expr("!false") is True
        assert eval_expr("!1") is False
        assert eval_expr("!''") is True

    def test_void(self):
        assert eval_expr("void true") is UNDEFINED

    def test_void_evaluates_argument(self):
        calls = []
        eval_expr("void f()", {"f": lambda: calls.append(1)})
        assert calls == [1]

    def test_typeof(self):
        assert eval_expr("typeof 1") == "number"
        assert eval_expr("typeof 's'") == "string"
        assert eval_expr("typeof true") == "boolean"
        assert eval_expr("typeof undefined") == "undefined"
        assert eval_expr("typeof missing") == "undefined"
        assert eval_expr("typeof null") == "object"
        assert eval_expr("typeof []") == "object"
        assert eval_expr("typeof (x => x)") == "function"
        assert eval_expr("typeof f", {"f": len}) == "function"

    def test_numeric_unary(self):
        assert eval_expr("-a", {"a": 5}) == -5
        assert eval_expr("+'3'") == 3
        assert eval_expr("~5") == -6

    def test_negative_zero(self):
        result = eval_expr("-0")
        assert result == 0
        assert math.copysign(1, result) == -1

    def test_postfix_unary_is_unsupported(self):
        node = UnaryExpression(
            position=0, operator="!", argument=Literal(position=1, value=1), prefix=False
        )
        with pytest.raises(UnsupportedConstruct, match='prefix: "false"'):
            evaluate(node, {})

    def test_unknown_unary_operator(self):
        node = UnaryExpression(position=0, operator="await", argument=Literal(position=1, value=1))
        with pytest.raises(InvalidOperator) as exc_info:
            evaluate(node, {})
        assert exc_info.value.node_type == "unary"


class TestLogical:
    """Tests for logical and conditional operators."""

    def test_or(self):
        assert eval_expr("true || false") is True
        assert eval_expr("0 || 'x'") == "x"

    def test_and(self):
        assert eval_expr("1 && 0") == 0
        assert eval_expr("'' && 'x'") == ""

    def test_grouping(self):
        assert eval_expr("(false || true) && (false || true)") is True

    def test_short_circuit(self):
        def fail():
            raise AssertionError("should not be called")

        assert eval_expr("true || fail()", {"fail": fail}) is True
        assert eval_expr("false && fail()", {"fail": fail}) is False

    def test_conditional(self):
        assert eval_expr("true ? 1 : 0") == 1
        assert eval_expr("false ? 1 : 0") == 0
        assert eval_expr("[] ? 'yes' : 'no'") == "yes"

    def test_conditional_evaluates_one_branch(self):
        def fail():
            raise AssertionError("should not be called")

        assert eval_expr("1 ? 'a' : fail()", {"fail": fail}) == "a"

    def test_nullish_coalescing_is_rejected(self):
        with pytest.raises(InvalidOperator, match='Unexpected logical operator "\\?\\?"'):
            eval_expr("a ?? b")

    def test_unknown_logical_operator(self):
        node = LogicalExpression(
            position=0, operator="^^", left=Literal(0, True), right=Literal(0, False)
        )
        with pytest.raises(InvalidOperator):
            evaluate(node, {})


class TestBinaryDispatch:
    """Tests for binary operator dispatch."""

    def test_arithmetic(self):
        assert eval_expr("1 + 2 * 3") == 7
        assert eval_expr("(1 + 2) * 3") == 9
        assert eval_expr("2 ** 3 ** 2") == 512

    def test_both_operands_evaluated_left_to_right(self):
        order = []

        def mark(value):
            order.append(value)
            return value

        eval_expr("mark(1) + mark(2)", {"mark": mark})
        assert order == [1, 2]

    def test_unknown_binary_operator(self):
        node = BinaryExpression(
            position=0, operator="<>", left=Literal(0, 1), right=Literal(0, 2)
        )
        with pytest.raises(InvalidOperator) as exc_info:
            evaluate(node, {})
        assert exc_info.value.operator == "<>"
        assert exc_info.value.node_type == "binary"


class TestClosures:
    """Tests for arrow functions."""

    def test_map_with_arrow(self):
        assert eval_expr("[1, 2, 3].map(x => x * x)") == [1, 4, 9]

    def test_multiple_parameters(self):
        assert eval_expr("((a, b) => a + b)(1, 2)") == 3

    def test_missing_arguments_are_undefined(self):
        assert eval_expr("((a, b) => b)(1)") is UNDEFINED

    def test_rest_parameter(self):
        assert eval_expr("((a, ...r) => r)(1, 2, 3)") == [2, 3]
        assert eval_expr("((...r) => r)()") == []

    def test_closures_are_callable_from_python(self):
        double = eval_expr("x => x * 2")
        assert isinstance(double, Closure)
        assert double(21) == 42

    def test_curried_closures(self):
        assert eval_expr("(x => y => x + y)(1)(2)") == 3

    def test_lexical_scope(self):
        f = evaluate(parse("() => x"), {"x": 1})
        assert eval_expr("f()", {"f": f, "x": 2}) == 1

    def test_sees_later_changes_to_captured_scope(self):
        scope = {"n": 1}
        f = evaluate(parse("() => n"), scope)
        scope["n"] = 2
        assert f() == 2

    def test_parameters_shadow_outer_names(self):
        assert eval_expr("(a => a)(2)", {"a": 1}) == 2

    def test_assignment_inside_closure_stays_local(self):
        scope = {}
        eval_expr("(x => (y = x))(1)", scope)
        assert "y" not in scope

    def test_length(self):
        assert eval_expr("((a, b, ...c) => a).length") == 2

    def test_async_arrow_is_unsupported(self):
        with pytest.raises(UnsupportedConstruct, match="async functions"):
            eval_expr("async x => x")

    def test_generator_is_unsupported(self):
        node = ArrowFunctionExpression(
            position=0, params=(), body=Literal(0, 1), generator=True
        )
        with pytest.raises(UnsupportedConstruct, match="generator functions"):
            evaluate(node, {})

    def test_block_body_is_unsupported(self):
        node = ArrowFunctionExpression(
            position=0,
            params=(),
            body=OpaqueNode(position=6, kind="BlockStatement", fields={}),
            expression=False,
        )
        with pytest.raises(UnsupportedConstruct, match="single expression"):
            evaluate(node, {})

    def test_default_parameters_are_unsupported(self):
        with pytest.raises(UnsupportedConstruct, match='"AssignmentPattern" parameter'):
            eval_expr("(a = 1) => a")

    def test_rest_must_be_last(self):
        node = ArrowFunctionExpression(
            position=0,
            params=(
                RestElement(position=1, argument=Identifier(4, "r")),
                Identifier(7, "a"),
            ),
            body=Identifier(13, "a"),
        )
        with pytest.raises(UnsupportedConstruct, match="rest parameter must be last"):
            evaluate(node, {})


class TestTemplates:
    """Tests for template literals."""

    def test_substitutes_values(self):
        assert eval_expr("`hello ${x}!`", {"x": "world"}) == "hello world!"

    def test_substitutes_null(self):
        assert eval_expr("`hello ${x}!`", {"x": None}) == "hello null!"

    def test_substitutes_undefined(self):
        assert eval_expr("`hello ${x}!`") == "hello undefined!"

    def test_expressions_and_arrays(self):
        assert eval_expr("`${1 + 1} items`") == "2 items"
        assert eval_expr("`${[1, 2]}`") == "1,2"

    def test_escapes_are_cooked(self):
        assert eval_expr("`a\\nb`") == "a\nb"

    def test_falls_back_to_raw_text(self):
        node = TemplateLiteral(
            position=0,
            quasis=(TemplateElement(position=1, cooked=None, raw="\\unicode", tail=True),),
            expressions=(),
        )
        assert evaluate(node, {}) == "\\unicode"

    def test_mismatched_parts_are_unsupported(self):
        node = TemplateLiteral(
            position=0,
            quasis=(TemplateElement(position=1, cooked="a", raw="a", tail=True),),
            expressions=(Literal(position=3, value=1),),
        )
        with pytest.raises(UnsupportedConstruct):
            evaluate(node, {})


class TestAssignment:
    """Tests for assignment expressions."""

    def test_assigns_and_returns_value(self):
        scope = {}
        assert eval_expr("a = 1", scope) == 1
        assert scope["a"] == 1

    def test_compound_assignment(self):
        scope = {"a": 1}
        assert eval_expr("a += 1", scope) == 2
        assert scope["a"] == 2

    def test_compound_operators(self):
        scope = {"a": 6}
        assert eval_expr("a -= 1", scope) == 5
        assert eval_expr("a *= 2", scope) == 10
        assert eval_expr("a /= 4", scope) == 2.5
        assert eval_expr("a **= 2", scope) == 6.25
        assert eval_expr("a %= 4", scope) == 2.25
        scope["a"] = 5
        assert eval_expr("a <<= 1", scope) == 10
        assert eval_expr("a |= 1", scope) == 11
        assert eval_expr("a &= 3", scope) == 3
        assert eval_expr("a ^= 1", scope) == 2
        assert eval_expr("a >>= 1", scope) == 1
        assert eval_expr("a >>>= 0", scope) == 1

    def test_compound_string_concatenation(self):
        scope = {"s": "a"}
        assert eval_expr("s += 1", scope) == "a1"

    def test_compound_on_missing_name(self):
        scope = {}
        result = eval_expr("a += 1", scope)
        assert math.isnan(result)

    def test_writes_to_innermost_frame(self):
        parent = {"a": 1}
        scope = Scope({}, parent=parent)
        assert eval_expr("a = 2", scope) == 2
        assert parent["a"] == 1
        assert scope["a"] == 2

    def test_compound_reads_through_chain(self):
        parent = {"a": 1}
        scope = Scope({}, parent=parent)
        assert eval_expr("a += 1", scope) == 2
        assert parent["a"] == 1

    def test_read_only_scope_raises(self):
        with pytest.raises(ExprTypeError, match="read-only scope"):
            eval_expr("a = 1", MappingProxyType({}))

    def test_member_assignment(self):
        obj = {}
        assert eval_expr("o.b = 2", {"o": obj}) == 2
        assert obj == {"b": 2}

    def test_computed_member_assignment(self):
        obj = {}
        eval_expr("o[k] = 1", {"o": obj, "k": "key"})
        assert obj == {"key": 1}

    def test_array_index_assignment_grows_list(self):
        items = []
        eval_expr("a[3] = 1", {"a": items})
        assert items == [UNDEFINED, UNDEFINED, UNDEFINED, 1]

    def test_array_length_assignment(self):
        items = [1, 2, 3]
        eval_expr("a.length = 1", {"a": items})
        assert items == [1]

    def test_compound_member_assignment(self):
        obj = {"n": 2}
        assert eval_expr("a.n *= 3", {"a": obj}) == 6
        assert obj["n"] == 6

    def test_compound_reads_target_before_right_side(self):
        obj = {"n": 2}
        assert eval_expr("a.n += (a.n = 10)", {"a": obj}) == 12
        assert obj["n"] == 12

    def test_assigning_to_primitive_raises(self):
        with pytest.raises(ExprTypeError, match="Cannot create property"):
            eval_expr("s.x = 1", {"s": "str"})

    def test_host_object_assignment(self):
        class Box:
            pass

        box = Box()
        eval_expr("b.value = 3", {"b": box})
        assert box.value == 3

    def test_logical_assignment_is_rejected(self):
        with pytest.raises(InvalidOperator) as exc_info:
            eval_expr("a ??= 1")
        assert exc_info.value.node_type == "assignment"

    def test_destructuring_is_unsupported(self):
        with pytest.raises(UnsupportedConstruct, match="ArrayPattern"):
            eval_expr("[a, b] = [1, 2]")

    def test_super_target_is_unsupported(self):
        with pytest.raises(UnsupportedConstruct):
            eval_expr("super.x = 1")


class TestDelete:
    """Tests for delete."""

    def test_delete_name(self):
        scope = {"a": {}}
        assert eval_expr("delete a", scope) is True
        assert "a" not in scope

    def test_delete_member(self):
        obj = {"b": 0}
        assert eval_expr("delete a.b", {"a": obj}) is True
        assert obj == {}

    def test_delete_missing_succeeds(self):
        assert eval_expr("delete missing") is True
        assert eval_expr("delete a.nope", {"a": {}}) is True

    def test_delete_only_touches_current_frame(self):
        parent = {"a": 1}
        scope = Scope({}, parent=parent)
        assert eval_expr("delete a", scope) is True
        assert parent == {"a": 1}

    def test_delete_from_read_only_scope(self):
        assert eval_expr("delete a", MappingProxyType({"a": 1})) is False

    def test_delete_array_index_leaves_hole(self):
        items = [1, 2]
        assert eval_expr("delete a[0]", {"a": items}) is True
        assert items == [UNDEFINED, 2]

    def test_delete_refused(self):
        assert eval_expr("delete a.length", {"a": [1]}) is False
        assert eval_expr("delete s[0]", {"s": "abc"}) is False

    def test_delete_other_targets_is_unsupported(self):
        with pytest.raises(UnsupportedConstruct, match="delete expression argument"):
            eval_expr("delete 1")

    def test_delete_super_member_is_unsupported(self):
        with pytest.raises(UnsupportedConstruct, match="super"):
            eval_expr("delete super.x")


class TestUnsupportedKinds:
    """Tests for node kinds outside the recognized set."""

    @pytest.mark.parametrize(
        "expression, kind",
        [
            ("this", "ThisExpression"),
            ("a, b", "SequenceExpression"),
            ("a++", "UpdateExpression"),
            ("--a", "UpdateExpression"),
        ],
    )
    def test_rejects_parsed_kinds(self, expression, kind):
        with pytest.raises(UnsupportedNodeKind) as exc_info:
            eval_expr(expression)
        assert exc_info.value.kind == kind
        assert f'Node type "{kind}" is not supported.' in str(exc_info.value)

    def test_rejects_opaque_nodes(self):
        node = OpaqueNode(position=3, kind="ObjectExpression", fields={})
        with pytest.raises(UnsupportedNodeKind) as exc_info:
            evaluate(node, {})
        assert exc_info.value.kind == "ObjectExpression"
        assert exc_info.value.position == 3

    def test_nested_unsupported_node(self):
        node = ArrayExpression(position=0, elements=(OpaqueNode(1, "ObjectExpression", {}),))
        with pytest.raises(UnsupportedNodeKind):
            evaluate(node, {})

    def test_super_member_read_is_unsupported(self):
        node = MemberExpression(position=5, object=Super(0), property=Identifier(6, "x"))
        with pytest.raises(UnsupportedConstruct):
            evaluate(node, {})

    def test_errors_share_base_class(self):
        assert issubclass(UnsupportedNodeKind, EvaluationError)
        assert issubclass(EvaluationError, ExpressionError)


class TestErrorPositions:
    """Tests for error position reporting."""

    def test_runtime_error_points_at_failing_node(self):
        source = "1 + a()"
        with pytest.raises(ExprTypeError) as exc_info:
            eval_expr(source, {"a": 1})
        error = exc_info.value
        assert error.position == 5
        assert error.expression == source
        assert error.format_with_context().endswith("\n       ^")

    def test_closure_construction_error_carries_source(self):
        source = "[1].map(async x => x)"
        with pytest.raises(UnsupportedConstruct) as exc_info:
            evaluate(parse(source), {}, source)
        error = exc_info.value
        assert error.expression == source
        assert error.position == source.index("async")
        assert error.format_with_context() == (
            "async functions are not supported.\n"
            f"  {source}\n"
            "          ^"
        )

    def test_innermost_node_wins(self):
        with pytest.raises(ExprTypeError) as exc_info:
            eval_expr("[1, b.c]", {"b": None})
        assert exc_info.value.position == 5

    def test_runtime_errors_are_builtin_type_errors(self):
        with pytest.raises(TypeError):
            eval_expr("a()", {"a": 1})


class TestTryEvaluate:
    """Tests for the non-raising entry point."""

    def test_success(self):
        result = try_evaluate(parse("1 + 1"), {})
        assert result.success is True
        assert result.value == 2
        assert result.error is None

    def test_failure(self):
        result = try_evaluate(parse("a()"), {"a": 1})
        assert result.success is False
        assert result.value is UNDEFINED
        assert result.error == "a is not a function"

    def test_failure_is_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="estree_eval.evaluator"):
            try_evaluate(parse("this"), {})
        assert any(record.getMessage() == "evaluation_failed" for record in caplog.records)


class TestEvaluateExpression:
    """Tests for evaluating source text directly."""

    def test_uses_global_scope_by_default(self):
        assert evaluate_expression("Math.max(1, 3, 2)") == 3

    def test_accepts_a_scope(self):
        scope = create_global_scope({"a": 5})
        assert evaluate_expression("Math.max(a, 2)", scope) == 5

    def test_accepts_plain_mappings(self):
        assert evaluate_expression("a + 1", {"a": 1}) == 2
