# =============================================================================
# lib/compiler.py - Spec Compiler
# =============================================================================
# Compiles a SpecDoc into a record validator. Each field becomes a
# CompiledField holding exactly one typed check:
#
#   NumberCheck  - numeric coercion (optional unit stripping), finite float
#   BooleanCheck - strict word mapping, native bool
#   DateCheck    - permissive date parsing, valid date
#   StringCheck  - native string, passed through
#   EnumCheck    - str(value) in the declared values (wins over the type)
#
# wrapped with nullability and an optional regex rule. Compilation never
# raises on bad field content: an uncompilable regex is dropped and reported
# in CompiledSpec.warnings. Validating a record never raises either: every
# problem comes back as a Violation.
#
# A CompiledSpec holds no mutable state after compile_spec() returns, so one
# instance can validate any number of records, from any thread.
# =============================================================================

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from core.models import FieldSpec, FieldType, IssueCode, SpecDoc
from lib.coercion import coerce_boolean, coerce_date, coerce_number, is_valid_date
from lib.utils import is_blank, is_finite_number

# Set up logging for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================

@dataclass(frozen=True)
class Violation:
    """
    One field-level problem found while validating a record.

    Examples:
        Violation(field="amount", message="Required", expected="number")
        Violation(field="extra", message="Unrecognized key 'extra'",
                  code=IssueCode.UNRECOGNIZED_KEY)
    """
    field: str
    message: str
    code: IssueCode = IssueCode.TYPE_OR_RULE_MISMATCH
    value: Any = None
    expected: str | None = None


@dataclass
class RecordResult:
    """Outcome of validating one record."""
    record: dict[str, Any] | None = None
    violations: list[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations


# =============================================================================
# Checks
# =============================================================================

class FieldCheck(ABC):
    """
    Coerce-then-check step for one field type.

    coerce() never raises; it returns the value as-is when it cannot do
    better, and accepts() rejects it.
    """

    kind: str = ""

    @property
    def expected(self) -> str:
        """Label reported as `expected` on a violation."""
        return self.kind

    def coerce(self, value: Any) -> Any:
        return value

    @abstractmethod
    def accepts(self, value: Any) -> bool:
        ...


@dataclass
class NumberCheck(FieldCheck):
    unit_tool: bool = False
    kind: str = "number"

    def coerce(self, value: Any) -> Any:
        number = coerce_number(value, unit_tool=self.unit_tool)
        if is_finite_number(number):
            return float(number)
        return number

    def accepts(self, value: Any) -> bool:
        return is_finite_number(value)


@dataclass
class BooleanCheck(FieldCheck):
    kind: str = "boolean"

    def coerce(self, value: Any) -> Any:
        return coerce_boolean(value)

    def accepts(self, value: Any) -> bool:
        return isinstance(value, bool)


@dataclass
class DateCheck(FieldCheck):
    kind: str = "date"

    def coerce(self, value: Any) -> Any:
        return coerce_date(value)

    def accepts(self, value: Any) -> bool:
        return is_valid_date(value)


@dataclass
class StringCheck(FieldCheck):
    kind: str = "string"

    def accepts(self, value: Any) -> bool:
        return isinstance(value, str)


@dataclass
class EnumCheck(FieldCheck):
    values: tuple[str, ...] = ()
    kind: str = "enum"

    @property
    def expected(self) -> str:
        return " | ".join(self.values)

    def coerce(self, value: Any) -> Any:
        return str(value)

    def accepts(self, value: Any) -> bool:
        return value in self.values


def build_check(spec_field: FieldSpec, unit_tool: bool = False) -> FieldCheck:
    """Pick the check for a field. Enum values take precedence over the type."""
    if spec_field.is_enum:
        return EnumCheck(values=tuple(spec_field.enum_vals))
    if spec_field.type == FieldType.NUMBER:
        return NumberCheck(unit_tool=unit_tool)
    if spec_field.type == FieldType.BOOLEAN:
        return BooleanCheck()
    if spec_field.type in (FieldType.DATE, FieldType.DATETIME):
        return DateCheck()
    return StringCheck()


# =============================================================================
# Compiled Field / Spec
# =============================================================================

@dataclass(frozen=True)
class CompiledField:
    """One field's check wrapped with nullability and an optional regex."""
    name: str
    check: FieldCheck
    nullable: bool = True
    pattern: re.Pattern | None = None

    def validate(self, raw: Any) -> tuple[Any, Violation | None]:
        """
        Validate one raw value.

        Returns:
            Tuple of (coerced value, violation or None)
        """
        if is_blank(raw):
            return self._missing(raw)

        value = self.check.coerce(raw)
        if value is None:
            # Unparsable numbers degrade to missing
            return self._missing(raw)

        if not self.check.accepts(value):
            return value, Violation(
                field=self.name,
                message=f"Expected {self.check.expected}, received {raw!r}",
                value=raw,
                expected=self.check.expected,
            )

        if self.pattern is not None and not self.pattern.search(str(value)):
            return value, Violation(
                field=self.name,
                message=f"Value {raw!r} does not match pattern {self.pattern.pattern!r}",
                value=raw,
                expected=self.pattern.pattern,
            )

        return value, None

    def _missing(self, raw: Any) -> tuple[Any, Violation | None]:
        if self.nullable:
            return None, None
        return None, Violation(
            field=self.name,
            message="Required",
            value=raw,
            expected=self.check.expected,
        )


@dataclass(frozen=True)
class CompiledSpec:
    """
    A Spec compiled into a record validator.

    Attributes:
        name: Spec name, for logging
        fields: Compiled fields in declaration order
        strict: Reject record keys not declared in the Spec
        warnings: Problems found while compiling (dropped regex rules)
    """
    name: str
    fields: tuple[CompiledField, ...]
    strict: bool = True
    warnings: tuple[Violation, ...] = ()

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def validate(self, record: dict[str, Any]) -> RecordResult:
        """
        Validate one record of raw values keyed by field name.

        Keys missing from the record are treated as missing values. In
        strict mode every key outside the declared field names is reported
        once as UNRECOGNIZED_KEY.
        """
        violations: list[Violation] = []
        coerced: dict[str, Any] = {}

        for compiled in self.fields:
            value, violation = compiled.validate(record.get(compiled.name))
            coerced[compiled.name] = value
            if violation is not None:
                violations.append(violation)

        if self.strict:
            declared = set(self.field_names)
            for key in record:
                if key not in declared:
                    violations.append(
                        Violation(
                            field=key,
                            message=f"Unrecognized key '{key}'",
                            code=IssueCode.UNRECOGNIZED_KEY,
                            value=record[key],
                        )
                    )

        if violations:
            return RecordResult(record=None, violations=violations)
        return RecordResult(record=coerced)


def _compile_pattern(spec_field: FieldSpec) -> tuple[re.Pattern | None, Violation | None]:
    """Compile a field's regex; a bad pattern becomes a warning, not an error."""
    if not spec_field.regex:
        return None, None
    if not spec_field.is_enum and spec_field.type != FieldType.STRING:
        logger.debug(f"Ignoring regex on non-string field '{spec_field.name}'")
        return None, None
    try:
        return re.compile(spec_field.regex), None
    except re.error as e:
        logger.warning(f"Dropping invalid regex on field '{spec_field.name}': {e}")
        return None, Violation(
            field=spec_field.name,
            message=f"Invalid regex {spec_field.regex!r}: {e}",
            code=IssueCode.INVALID_RULE,
            expected=spec_field.regex,
        )


def compile_spec(
    spec: SpecDoc,
    unit_tool: bool = False,
    strict: bool = True,
) -> CompiledSpec:
    """
    Compile a Spec into a reusable record validator.

    Args:
        spec: The Spec to compile
        unit_tool: Strip unit text from numeric values ("12.5 kg" -> 12.5)
        strict: Report record keys not declared in the Spec

    Returns:
        CompiledSpec ready to validate records
    """
    fields: list[CompiledField] = []
    warnings: list[Violation] = []

    for spec_field in spec.fields:
        pattern, warning = _compile_pattern(spec_field)
        if warning is not None:
            warnings.append(warning)
        fields.append(
            CompiledField(
                name=spec_field.name,
                check=build_check(spec_field, unit_tool=unit_tool),
                nullable=spec_field.nullable,
                pattern=pattern,
            )
        )

    logger.debug(
        f"Compiled spec '{spec.name}' {spec.version}: {len(fields)} fields, "
        f"unit_tool={unit_tool}, strict={strict}"
    )

    return CompiledSpec(
        name=spec.name,
        fields=tuple(fields),
        strict=strict,
        warnings=tuple(warnings),
    )
