# =============================================================================
# tests/test_compiler.py - Spec Compiler Tests
# =============================================================================
# Tests for lib/compiler.py:
#   - Check selection per field type (enum precedence)
#   - Nullability and the "Required" violation
#   - Regex rules, including uncompilable patterns
#   - Strict-mode rejection of undeclared keys
#
# Run with: pytest tests/test_compiler.py -v
# =============================================================================

import pytest

from core.models import FieldSpec, FieldType, IssueCode, SpecDoc
from lib.compiler import (
    BooleanCheck,
    DateCheck,
    EnumCheck,
    NumberCheck,
    StringCheck,
    build_check,
    compile_spec,
)


def make_spec(*fields: FieldSpec) -> SpecDoc:
    return SpecDoc(name="t", version="v1", fields=list(fields))


# =============================================================================
# Check Selection
# =============================================================================

class TestBuildCheck:
    """Tests for build_check()."""

    @pytest.mark.parametrize(
        "field_type, check_cls",
        [
            (FieldType.NUMBER, NumberCheck),
            (FieldType.BOOLEAN, BooleanCheck),
            (FieldType.DATE, DateCheck),
            (FieldType.DATETIME, DateCheck),
            (FieldType.STRING, StringCheck),
        ],
    )
    def test_type_to_check(self, field_type, check_cls):
        check = build_check(FieldSpec(name="x", type=field_type))
        assert isinstance(check, check_cls)

    def test_enum_takes_precedence_over_type(self):
        check = build_check(FieldSpec(name="x", type=FieldType.NUMBER, enum_vals=["1", "2"]))
        assert isinstance(check, EnumCheck)
        assert check.values == ("1", "2")

    def test_empty_enum_is_ignored(self):
        check = build_check(FieldSpec(name="x", type=FieldType.NUMBER, enum_vals=[]))
        assert isinstance(check, NumberCheck)

    def test_unit_tool_reaches_number_check(self):
        check = build_check(FieldSpec(name="x", type=FieldType.NUMBER), unit_tool=True)
        assert check.unit_tool is True


# =============================================================================
# Record Validation
# =============================================================================

class TestCompiledSpecValidate:
    """Tests for CompiledSpec.validate()."""

    def test_valid_record_is_coerced(self, orders_spec):
        compiled = compile_spec(orders_spec)
        result = compiled.validate({
            "order_id": "ORD-7",
            "amount": "1,200.50",
            "paid": "Y",
            "order_date": "2024-01-15",
            "status": "shipped",
        })

        assert result.ok
        assert result.record["amount"] == 1200.50
        assert result.record["paid"] is True
        assert result.record["order_date"].year == 2024
        assert result.record["status"] == "shipped"

    def test_nullable_blank_becomes_none(self):
        compiled = compile_spec(make_spec(FieldSpec(name="note", nullable=True)))
        for raw in [None, "", "   "]:
            result = compiled.validate({"note": raw})
            assert result.ok
            assert result.record["note"] is None

    def test_required_blank_fails(self):
        compiled = compile_spec(make_spec(FieldSpec(name="amount", type=FieldType.NUMBER, nullable=False)))
        result = compiled.validate({"amount": ""})

        assert not result.ok
        assert result.record is None
        [violation] = result.violations
        assert violation.field == "amount"
        assert violation.message == "Required"
        assert violation.code == IssueCode.TYPE_OR_RULE_MISMATCH

    def test_absent_key_counts_as_missing(self):
        compiled = compile_spec(make_spec(FieldSpec(name="amount", type=FieldType.NUMBER, nullable=False)))
        result = compiled.validate({})
        assert [v.message for v in result.violations] == ["Required"]

    def test_unparsable_number_fails_required(self):
        compiled = compile_spec(make_spec(FieldSpec(name="amount", type=FieldType.NUMBER, nullable=False)))
        result = compiled.validate({"amount": "abc"})
        assert not result.ok
        assert result.violations[0].value == "abc"

    def test_unparsable_number_on_nullable_field_is_accepted(self):
        compiled = compile_spec(make_spec(FieldSpec(name="amount", type=FieldType.NUMBER, nullable=True)))
        result = compiled.validate({"amount": "abc"})
        assert result.ok
        assert result.record["amount"] is None

    def test_non_finite_number_fails(self):
        compiled = compile_spec(make_spec(FieldSpec(name="amount", type=FieldType.NUMBER)))
        result = compiled.validate({"amount": "1e999"})
        assert not result.ok
        assert result.violations[0].expected == "number"

    def test_unit_tool_accepts_unit_suffix(self):
        spec = make_spec(FieldSpec(name="weight", type=FieldType.NUMBER, nullable=False))
        assert not compile_spec(spec).validate({"weight": "12.5 kg"}).ok
        result = compile_spec(spec, unit_tool=True).validate({"weight": "12.5 kg"})
        assert result.ok
        assert result.record["weight"] == 12.5

    def test_boolean_rejects_unknown_word(self):
        compiled = compile_spec(make_spec(FieldSpec(name="paid", type=FieldType.BOOLEAN)))
        result = compiled.validate({"paid": "maybe"})
        assert not result.ok
        assert result.violations[0].expected == "boolean"

    def test_invalid_date_fails_even_when_nullable(self):
        compiled = compile_spec(make_spec(FieldSpec(name="d", type=FieldType.DATE, nullable=True)))
        assert not compiled.validate({"d": "not a date"}).ok
        assert compiled.validate({"d": ""}).ok

    def test_string_rejects_non_strings(self):
        compiled = compile_spec(make_spec(FieldSpec(name="s")))
        assert compiled.validate({"s": "text"}).ok
        assert not compiled.validate({"s": 12}).ok

    def test_enum_compares_string_form(self):
        compiled = compile_spec(make_spec(FieldSpec(name="level", enum_vals=["1", "2"])))
        assert compiled.validate({"level": 1}).record == {"level": "1"}
        result = compiled.validate({"level": "3"})
        assert not result.ok
        assert result.violations[0].expected == "1 | 2"


# =============================================================================
# Regex Rules
# =============================================================================

class TestRegexRules:
    """Tests for regex handling."""

    def test_regex_mismatch_is_rule_violation(self, orders_spec):
        compiled = compile_spec(orders_spec)
        result = compiled.validate({
            "order_id": "X-1",
            "amount": "1",
            "order_date": "2024-01-01",
            "status": "pending",
        })
        [violation] = result.violations
        assert violation.field == "order_id"
        assert violation.expected == r"^ORD-\d+$"

    def test_regex_uses_search_semantics(self):
        compiled = compile_spec(make_spec(FieldSpec(name="code", regex=r"\d{3}")))
        assert compiled.validate({"code": "abc123def"}).ok

    def test_regex_applies_to_enum_fields(self):
        compiled = compile_spec(make_spec(FieldSpec(name="c", enum_vals=["aa", "b"], regex="^a")))
        assert compiled.validate({"c": "aa"}).ok
        assert not compiled.validate({"c": "b"}).ok

    def test_regex_ignored_on_number_fields(self):
        compiled = compile_spec(make_spec(FieldSpec(name="n", type=FieldType.NUMBER, regex="^x$")))
        assert compiled.validate({"n": "5"}).ok

    def test_invalid_regex_is_dropped_with_warning(self):
        compiled = compile_spec(make_spec(FieldSpec(name="code", regex="([a-z")))
        assert compiled.fields[0].pattern is None
        [warning] = compiled.warnings
        assert warning.code == IssueCode.INVALID_RULE
        assert warning.field == "code"
        assert compiled.validate({"code": "anything"}).ok


# =============================================================================
# Strict Mode
# =============================================================================

class TestStrictMode:
    """Tests for undeclared key handling."""

    def test_unknown_keys_reported_once_each(self):
        compiled = compile_spec(make_spec(FieldSpec(name="a")))
        result = compiled.validate({"a": "x", "b": "1", "c": "2"})

        assert not result.ok
        codes = [(v.code, v.field) for v in result.violations]
        assert codes == [
            (IssueCode.UNRECOGNIZED_KEY, "b"),
            (IssueCode.UNRECOGNIZED_KEY, "c"),
        ]

    def test_non_strict_ignores_unknown_keys(self):
        compiled = compile_spec(make_spec(FieldSpec(name="a")), strict=False)
        result = compiled.validate({"a": "x", "b": "1"})
        assert result.ok
        assert result.record == {"a": "x"}

    def test_compiled_spec_is_reusable(self, orders_spec):
        compiled = compile_spec(orders_spec)
        first = compiled.validate({"order_id": "ORD-1"})
        second = compiled.validate({"order_id": "ORD-1"})
        assert first.violations == second.violations
        assert compiled.field_names == orders_spec.get_field_names()
