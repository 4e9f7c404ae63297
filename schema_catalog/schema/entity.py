"""
Core entity definitions for the schema catalog.

This module defines the immutable value objects of the inheritance graph:
- SectionDef: A named, ordered group of field names
- DisplayConfig / FormConfig: Header + sections layout configuration
- SchemaEntity: A named schema node with parents and field/sub-entity sets

Invariants:
    - Entity names are non-empty and contain none of ``< > { } | #``
    - An entity never lists itself as a parent
    - Required and optional sets are disjoint, per namespace
    - Parents keep declaration order (local precedence for C3)
    - Every merge returns a new entity; inputs are never modified

How to change safely:
    - Add new scalar metadata with a default so raw data stays loadable
    - Decide for each new scalar whether merge takes child-only or
      child-then-parent, and cover it in tests
    - Keep to_dict/from_dict symmetric

Example:
    >>> from schema_catalog.schema.entity import SchemaEntity
    >>> Person = SchemaEntity(
    ...     name="Person",
    ...     required_fields=("FullName",),
    ...     optional_fields=("Bio",),
    ... )
    >>> Employee = SchemaEntity(name="Employee", parents=("Person",),
    ...                         required_fields=("Email",))
    >>> Employee.merge_with_parent(Person).required_fields
    ('FullName', 'Email')
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Any, TypeVar

from ..errors import EntityDefinitionError

FORBIDDEN_NAME_CHARS = frozenset("<>{}|#")

_ConfigT = TypeVar("_ConfigT", bound="SectionConfig")


def normalize_names(
    values: Any,
    what: str = "names",
    entity_name: str | None = None,
) -> tuple[str, ...]:
    """Normalize a list of names.

    Each value is coerced to ``str`` and trimmed. Empty values are dropped
    and duplicates removed, keeping the first occurrence.

    Args:
        values: Iterable of names (``None`` means empty)
        what: Description of the list, used in error messages
        entity_name: Owning entity, used in error messages

    Returns:
        Tuple of distinct, non-empty names in input order

    Raises:
        EntityDefinitionError: If values is a bare string or not iterable
    """
    if values is None:
        return ()
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        owner = f"Entity '{entity_name}': " if entity_name else ""
        raise EntityDefinitionError(
            f"{owner}'{what}' must be a list, got {type(values).__name__}",
            entity_name=entity_name,
        )
    out: list[str] = []
    for value in values:
        text = str(value).strip()
        if text and text not in out:
            out.append(text)
    return tuple(out)


def validate_entity_name(name: Any) -> str:
    """Trim and validate an entity name.

    Raises:
        EntityDefinitionError: If the name is empty or has forbidden characters
    """
    text = str(name if name is not None else "").strip()
    if not text:
        raise EntityDefinitionError("Entity name cannot be empty")
    bad = sorted(FORBIDDEN_NAME_CHARS.intersection(text))
    if bad:
        raise EntityDefinitionError(
            f"Entity '{text}' contains invalid characters: {''.join(bad)}",
            entity_name=text,
        )
    return text


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require_mapping(data: Any, key: str, entity_name: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise EntityDefinitionError(
            f"Entity '{entity_name}': '{key}' must be a mapping, got {type(data).__name__}",
            entity_name=entity_name,
        )
    return data


@dataclass(frozen=True)
class SectionDef:
    """A named section listing field names in display order.

    Attributes:
        name: Section name, the match key when merging with a parent
        fields: Ordered field names shown in the section
    """

    name: str
    fields: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", str(self.name).strip())
        object.__setattr__(self, "fields", normalize_names(self.fields, "fields"))

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "fields": list(self.fields)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SectionDef:
        if not isinstance(data, Mapping):
            raise EntityDefinitionError(
                f"Section must be a mapping, got {type(data).__name__}"
            )
        return cls(name=data.get("name", ""), fields=data.get("fields") or ())


def merge_sections(
    parent: tuple[SectionDef, ...],
    child: tuple[SectionDef, ...],
) -> tuple[SectionDef, ...]:
    """Merge child sections over parent sections.

    A child section whose name matches a parent section replaces it at the
    parent's position. Child sections with new names are appended in the
    child's order.
    """
    merged = list(parent)
    for section in child:
        for i, existing in enumerate(merged):
            if existing.name == section.name:
                merged[i] = section
                break
        else:
            merged.append(section)
    return tuple(merged)


@dataclass(frozen=True)
class SectionConfig:
    """Layout configuration: an optional header plus named sections.

    Attributes:
        header: Flat list of field names, or None when not specified
        sections: Ordered sections
    """

    header: tuple[str, ...] | None = None
    sections: tuple[SectionDef, ...] = ()

    def __post_init__(self) -> None:
        if self.header is not None:
            object.__setattr__(self, "header", normalize_names(self.header, "header"))
        sections = tuple(
            s if isinstance(s, SectionDef) else SectionDef.from_dict(s)
            for s in (self.sections or ())
        )
        object.__setattr__(self, "sections", sections)

    @property
    def is_empty(self) -> bool:
        return self.header is None and not self.sections

    def merge_with_parent(self: _ConfigT, parent: _ConfigT) -> _ConfigT:
        """Return this configuration layered over ``parent``.

        A specified header replaces the parent's header entirely; sections
        are merged by name via :func:`merge_sections`.
        """
        header = self.header if self.header is not None else parent.header
        return type(self)(
            header=header,
            sections=merge_sections(parent.sections, self.sections),
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.header is not None:
            result["header"] = list(self.header)
        if self.sections:
            result["sections"] = [s.to_dict() for s in self.sections]
        return result

    @classmethod
    def from_dict(cls: type[_ConfigT], data: Mapping[str, Any]) -> _ConfigT:
        header = data.get("header")
        sections = data.get("sections") or ()
        if isinstance(sections, (str, bytes)) or not isinstance(sections, Iterable):
            raise EntityDefinitionError(
                f"'sections' must be a list, got {type(sections).__name__}"
            )
        return cls(
            header=None if header is None else normalize_names(header, "header"),
            sections=tuple(SectionDef.from_dict(s) for s in sections),
        )


@dataclass(frozen=True)
class DisplayConfig(SectionConfig):
    """Display (rendered page) layout of an entity."""


@dataclass(frozen=True)
class FormConfig(SectionConfig):
    """Entry form layout of an entity."""


@dataclass(frozen=True)
class SchemaEntity:
    """Immutable definition of a schema entity (category).

    Attributes:
        name: Unique identifier within a catalog
        parents: Direct parents in declaration (precedence) order
        label: Display label (defaults to the name)
        description: Human-readable description
        target_namespace: Namespace pages of this entity are created in
        render_as: Name of the display format used to render the entity
        required_fields: Field names that must be filled
        optional_fields: Field names that may be filled
        required_sub_entities: Sub-entity names that must be present
        optional_sub_entities: Sub-entity names that may be present
        display: Display layout configuration
        forms: Entry form layout configuration

    Raises:
        EntityDefinitionError: On any invariant violation at construction
    """

    name: str
    parents: tuple[str, ...] = ()
    label: str = ""
    description: str = ""
    target_namespace: str | None = None
    render_as: str | None = None
    required_fields: tuple[str, ...] = ()
    optional_fields: tuple[str, ...] = ()
    required_sub_entities: tuple[str, ...] = ()
    optional_sub_entities: tuple[str, ...] = ()
    display: DisplayConfig = dataclass_field(default_factory=DisplayConfig)
    forms: FormConfig = dataclass_field(default_factory=FormConfig)

    def __post_init__(self) -> None:
        """Normalize and validate the entity definition."""
        name = validate_entity_name(self.name)
        set_ = object.__setattr__
        set_(self, "name", name)

        parents = tuple(
            validate_entity_name(p) for p in normalize_names(self.parents, "parents", name)
        )
        if name in parents:
            raise EntityDefinitionError(
                f"Entity '{name}' cannot be its own parent", entity_name=name
            )
        set_(self, "parents", parents)

        label = str(self.label if self.label is not None else "").strip()
        set_(self, "label", label or name)
        set_(self, "description", str(self.description if self.description is not None else ""))
        set_(self, "target_namespace", _optional_text(self.target_namespace))
        set_(self, "render_as", _optional_text(self.render_as))

        for namespace in ("fields", "sub_entities"):
            required = normalize_names(
                getattr(self, f"required_{namespace}"), f"required_{namespace}", name
            )
            optional = normalize_names(
                getattr(self, f"optional_{namespace}"), f"optional_{namespace}", name
            )
            overlap = [n for n in required if n in optional]
            if overlap:
                raise EntityDefinitionError(
                    f"Entity '{name}' has {namespace.replace('_', '-')} listed as both "
                    f"required and optional: {', '.join(overlap)}",
                    entity_name=name,
                )
            set_(self, f"required_{namespace}", required)
            set_(self, f"optional_{namespace}", optional)

        if not isinstance(self.display, DisplayConfig):
            set_(self, "display", DisplayConfig.from_dict(_require_mapping(self.display, "display", name)))
        if not isinstance(self.forms, FormConfig):
            set_(self, "forms", FormConfig.from_dict(_require_mapping(self.forms, "forms", name)))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_all_fields(self) -> list[str]:
        """Required then optional field names."""
        return list(self.required_fields) + list(self.optional_fields)

    def get_all_sub_entities(self) -> list[str]:
        """Required then optional sub-entity names."""
        return list(self.required_sub_entities) + list(self.optional_sub_entities)

    def has_sub_entities(self) -> bool:
        return bool(self.required_sub_entities or self.optional_sub_entities)

    def get_tagged_fields(self) -> list[tuple[str, bool]]:
        """Get (name, is_required) pairs for all fields, required first."""
        return [(n, True) for n in self.required_fields] + [
            (n, False) for n in self.optional_fields
        ]

    def get_tagged_sub_entities(self) -> list[tuple[str, bool]]:
        """Get (name, is_required) pairs for all sub-entities, required first."""
        return [(n, True) for n in self.required_sub_entities] + [
            (n, False) for n in self.optional_sub_entities
        ]

    @property
    def display_header(self) -> tuple[str, ...]:
        return self.display.header or ()

    @property
    def display_sections(self) -> tuple[SectionDef, ...]:
        return self.display.sections

    @property
    def form_sections(self) -> tuple[SectionDef, ...]:
        return self.forms.sections

    # ------------------------------------------------------------------
    # Merging
    # ------------------------------------------------------------------

    def merge_with_parent(self, parent: SchemaEntity) -> SchemaEntity:
        """Combine this (more specific) entity with a less specific parent.

        Required names are unioned, parent first. Optional names are unioned
        and then stripped of anything required, so a name required on either
        side ends up required. Headers from this entity replace the parent's,
        sections are merged by name. Identity, descriptive metadata and
        ``target_namespace`` stay with this entity, even when unset here;
        ``render_as`` falls back to the parent's.

        Args:
            parent: The ancestor being folded in

        Returns:
            A new SchemaEntity; neither input is modified
        """
        required_fields = _union(parent.required_fields, self.required_fields)
        optional_fields = _difference(
            _union(parent.optional_fields, self.optional_fields), required_fields
        )
        required_subs = _union(parent.required_sub_entities, self.required_sub_entities)
        optional_subs = _difference(
            _union(parent.optional_sub_entities, self.optional_sub_entities), required_subs
        )

        return SchemaEntity(
            name=self.name,
            parents=self.parents,
            label=self.label,
            description=self.description,
            target_namespace=self.target_namespace,
            render_as=self.render_as or parent.render_as,
            required_fields=required_fields,
            optional_fields=optional_fields,
            required_sub_entities=required_subs,
            optional_sub_entities=optional_subs,
            display=self.display.merge_with_parent(parent.display),
            forms=self.forms.merge_with_parent(parent.forms),
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result: dict[str, Any] = {
            "name": self.name,
            "parents": list(self.parents),
            "label": self.label,
            "description": self.description,
            "fields": {
                "required": list(self.required_fields),
                "optional": list(self.optional_fields),
            },
        }
        if self.has_sub_entities():
            result["sub_entities"] = {
                "required": list(self.required_sub_entities),
                "optional": list(self.optional_sub_entities),
            }
        if not self.display.is_empty:
            result["display"] = self.display.to_dict()
        if not self.forms.is_empty:
            result["forms"] = self.forms.to_dict()
        if self.target_namespace is not None:
            result["target_namespace"] = self.target_namespace
        if self.render_as is not None:
            result["render_as"] = self.render_as
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], name: str | None = None) -> SchemaEntity:
        """Create from dictionary representation.

        Args:
            data: Raw definition (see ``to_dict`` for the shape)
            name: Entity name, overriding ``data["name"]`` (for maps keyed by name)

        Raises:
            EntityDefinitionError: If the data is malformed
        """
        if not isinstance(data, Mapping):
            raise EntityDefinitionError(
                f"Entity definition must be a mapping, got {type(data).__name__}",
                entity_name=name,
            )
        entity_name = validate_entity_name(name if name is not None else data.get("name"))
        fields = _require_mapping(data.get("fields"), "fields", entity_name)
        subs = _require_mapping(data.get("sub_entities"), "sub_entities", entity_name)
        display = _require_mapping(data.get("display"), "display", entity_name)
        forms = _require_mapping(data.get("forms"), "forms", entity_name)
        return cls(
            name=entity_name,
            parents=normalize_names(data.get("parents"), "parents", entity_name),
            label=data.get("label") or "",
            description=data.get("description") or "",
            target_namespace=data.get("target_namespace"),
            render_as=data.get("render_as"),
            required_fields=normalize_names(fields.get("required"), "fields.required", entity_name),
            optional_fields=normalize_names(fields.get("optional"), "fields.optional", entity_name),
            required_sub_entities=normalize_names(
                subs.get("required"), "sub_entities.required", entity_name
            ),
            optional_sub_entities=normalize_names(
                subs.get("optional"), "sub_entities.optional", entity_name
            ),
            display=DisplayConfig.from_dict(display),
            forms=FormConfig.from_dict(forms),
        )


def _union(first: tuple[str, ...], second: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(first + second))


def _difference(values: tuple[str, ...], remove: tuple[str, ...]) -> tuple[str, ...]:
    excluded = set(remove)
    return tuple(v for v in values if v not in excluded)
