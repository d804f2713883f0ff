# =============================================================================
# core/models/spec.py - Spec Document Schemas
# =============================================================================
# A Spec is a named, versioned column schema used as validation ground truth.
# These models define its structure:
# - FieldSpec: one declared column (type, nullability, unit, enum, regex)
# - SpecDoc: the full document with keys, relations and example rows
# - PredictedSpec: the looser shape a language model returns when asked to
#   predict a Spec from a raw file
#
# Python attributes are snake_case; JSON uses the camelCase wire names
# (enumVals, isPrimary, toSpec, ...). Both forms are accepted on input.
# =============================================================================

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


# =============================================================================
# Enums
# =============================================================================

class FieldType(str, Enum):
    """Declared type of a Spec field."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"


class SpecDomain(str, Enum):
    """Business domain a Spec belongs to."""
    FINANCE = "finance"
    HEALTHCARE = "healthcare"
    ECOMMERCE = "ecommerce"
    GENERIC = "generic"


class OnDelete(str, Enum):
    """Referential action for a relation."""
    CASCADE = "cascade"
    RESTRICT = "restrict"
    SET_NULL = "set_null"


class CamelModel(BaseModel):
    """Base model serializing to the camelCase JSON shape."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase JSON-ready dict (None values dropped)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# Field Definition
# =============================================================================

class FieldSpec(CamelModel):
    """
    One declared column of a Spec.

    If enum_vals is non-empty the field is treated as a constrained string
    regardless of `type`. A regex only applies to string/enum fields.

    Example:
        {
            "name": "amount",
            "type": "number",
            "nullable": false,
            "unit": "MYR"
        }
    """

    name: str = Field(
        ...,
        min_length=1,
        description="Column name as it appears in the dataset header"
    )

    type: FieldType = Field(
        default=FieldType.STRING,
        description="Declared value type"
    )

    nullable: bool = Field(
        default=True,
        description="Whether empty/missing values are acceptable"
    )

    unit: str | None = Field(
        default=None,
        description="Free-text measurement unit (e.g. 'MYR', 'kg', '%')"
    )

    enum_vals: list[str] | None = Field(
        default=None,
        description="Closed set of allowed string values"
    )

    regex: str | None = Field(
        default=None,
        description="Pattern the string value must match"
    )

    is_primary: bool = Field(
        default=False,
        description="Whether this field is part of the primary key"
    )

    description: str | None = Field(
        default=None,
        description="Human-readable description"
    )

    @property
    def is_enum(self) -> bool:
        """True when the field is constrained to enum_vals."""
        return bool(self.enum_vals)


class SpecKeys(CamelModel):
    """Primary and unique key declarations (composite keys supported)."""

    primary: list[str] | None = Field(default=None)
    unique: list[list[str]] | None = Field(default=None)


class SpecRelation(CamelModel):
    """A reference from a local field to a field of another Spec."""

    # `from` is a keyword, so the attribute carries a trailing underscore
    from_: str = Field(..., alias="from")
    to_spec: str
    to_field: str
    on_delete: OnDelete | None = None


# =============================================================================
# Spec Document
# =============================================================================

class SpecDoc(CamelModel):
    """
    A named, versioned column schema.

    Immutable once persisted: edits produce a new (name, version) pair
    (see lib.spec_io.bump_version).

    Example usage:
        spec = SpecDoc(
            name="orders",
            version="v1",
            fields=[FieldSpec(name="id", type="string", nullable=False)],
        )
        compiled = compile_spec(spec)
    """

    name: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    domain: SpecDomain | None = Field(default=None)

    fields: list[FieldSpec] = Field(
        default_factory=list,
        description="Ordered field declarations"
    )

    keys: SpecKeys | None = None
    relations: list[SpecRelation] | None = None
    examples: list[dict[str, Any]] | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _check_unique_field_names(self) -> "SpecDoc":
        seen: set[str] = set()
        duplicates = []
        for f in self.fields:
            if f.name in seen:
                duplicates.append(f.name)
            seen.add(f.name)
        if duplicates:
            raise ValueError(f"Duplicate field names in spec '{self.name}': {duplicates}")
        return self

    def get_field_names(self) -> list[str]:
        """Get declared field names in order."""
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> FieldSpec | None:
        """Look up a field by exact name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def get_primary_keys(self) -> list[str]:
        """Primary key fields from `keys`, falling back to is_primary flags."""
        if self.keys and self.keys.primary:
            return list(self.keys.primary)
        return [f.name for f in self.fields if f.is_primary]


# =============================================================================
# Predicted Spec (model output)
# =============================================================================

class PredictedField(CamelModel):
    """A field as predicted by a language model. Looser than FieldSpec."""

    name: str = Field(..., min_length=1)
    type: FieldType = FieldType.STRING
    nullable: bool = True
    unit: str | None = None
    enum_vals: list[str] = Field(default_factory=list)
    is_primary: bool = False


class PredictedSpec(CamelModel):
    """A Spec predicted from a raw file, graded against the ground truth."""

    title: str | None = None
    version: str = "predicted"
    fields: list[PredictedField] = Field(default_factory=list)
