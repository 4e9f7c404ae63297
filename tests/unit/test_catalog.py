"""
Unit tests for the entity catalog.

Tests cover:
- Entity registration
- Catalog freezing
- Fingerprint generation
- Duplicate detection
- Whole-catalog validation
"""

import logging

import pytest

from schema_catalog.config import ValidationConfig
from schema_catalog.errors import (
    CatalogFrozenError,
    DuplicateEntityError,
    EntityDefinitionError,
)
from schema_catalog.schema.catalog import EntityCatalog
from schema_catalog.schema.entity import SchemaEntity


def make_catalog(*entities, strict=False):
    """Helper to create a catalog with entities."""
    catalog = EntityCatalog(validation=ValidationConfig(unknown_parents_are_errors=strict))
    for entity in entities:
        catalog.register(entity)
    return catalog


class TestRegistration:
    """Tests for registering entities."""

    def test_register_entity(self):
        """Can register an entity."""
        person = SchemaEntity(name="Person")
        catalog = make_catalog(person)

        assert catalog.get("Person") is person
        assert "Person" in catalog
        assert len(catalog) == 1

    def test_register_dict(self):
        """Can register raw data."""
        catalog = make_catalog()

        entity = catalog.register_dict({"name": "Person", "fields": {"required": ["FullName"]}})

        assert catalog.get("Person") == entity
        assert entity.required_fields == ("FullName",)

    def test_register_dict_invalid_raises(self):
        """Malformed raw data fails loudly."""
        catalog = make_catalog()
        with pytest.raises(EntityDefinitionError):
            catalog.register_dict({"name": "Person", "parents": ["Person"]})
        assert "Person" not in catalog

    def test_duplicate_name_raises(self):
        """Registering a name twice raises."""
        catalog = make_catalog(SchemaEntity(name="Person"))

        with pytest.raises(DuplicateEntityError, match="'Person' already registered"):
            catalog.register(SchemaEntity(name="Person"))

    def test_unknown_name_returns_none(self):
        """get() returns None for unknown names."""
        assert make_catalog().get("Ghost") is None

    def test_iterate_entities(self):
        """Can iterate over entities."""
        catalog = make_catalog(SchemaEntity(name="A"), SchemaEntity(name="B"))
        assert [e.name for e in catalog.entities()] == ["A", "B"]


class TestFreeze:
    """Tests for freezing and fingerprints."""

    def test_freeze(self):
        """Freezing computes a fingerprint."""
        catalog = make_catalog(SchemaEntity(name="Person"))

        fingerprint = catalog.freeze()

        assert catalog.frozen is True
        assert fingerprint.startswith("sha256:")
        assert catalog.fingerprint == fingerprint

    def test_freeze_twice_raises(self):
        """Freezing twice raises."""
        catalog = make_catalog()
        catalog.freeze()

        with pytest.raises(CatalogFrozenError):
            catalog.freeze()

    def test_register_after_freeze_raises(self):
        """Registering after freeze raises."""
        catalog = make_catalog()
        catalog.freeze()

        with pytest.raises(CatalogFrozenError, match="catalog is frozen"):
            catalog.register(SchemaEntity(name="Person"))

    def test_fingerprint_independent_of_registration_order(self):
        """Same entities in any order give the same fingerprint."""
        a = SchemaEntity(name="A", required_fields=("X",))
        b = SchemaEntity(name="B", parents=("A",))

        assert make_catalog(a, b).freeze() == make_catalog(b, a).freeze()

    def test_fingerprint_changes_with_definitions(self):
        """Different definitions give different fingerprints."""
        first = make_catalog(SchemaEntity(name="A", required_fields=("X",)))
        second = make_catalog(SchemaEntity(name="A", required_fields=("X", "Y")))

        assert first.freeze() != second.freeze()


class TestSerialization:
    """Tests for catalog to_dict/from_dict."""

    def test_to_dict_sorted_by_name(self):
        """Entities are serialized sorted by name."""
        catalog = make_catalog(SchemaEntity(name="B"), SchemaEntity(name="A"))
        assert [e["name"] for e in catalog.to_dict()["entities"]] == ["A", "B"]

    def test_from_dict_list(self):
        """Can load a list of definitions."""
        catalog = EntityCatalog.from_dict(
            {"entities": [{"name": "Person"}, {"name": "Employee", "parents": ["Person"]}]},
            validation=ValidationConfig(),
        )
        assert catalog.get("Employee").parents == ("Person",)

    def test_from_dict_mapping(self):
        """Can load definitions keyed by name."""
        catalog = EntityCatalog.from_dict(
            {"entities": {"Person": {"fields": {"optional": ["Bio"]}}}},
            validation=ValidationConfig(),
        )
        assert catalog.get("Person").optional_fields == ("Bio",)

    def test_json_round_trip(self):
        """to_json/from_json preserves the catalog."""
        catalog = make_catalog(
            SchemaEntity(name="Person", required_fields=("FullName",)),
            SchemaEntity(name="Employee", parents=("Person",), display={"header": ["FullName"]}),
        )

        loaded = EntityCatalog.from_json(catalog.to_json(), validation=ValidationConfig())

        assert loaded.as_map() == catalog.as_map()


class TestResolverAndValidation:
    """Tests for resolver() and validate_all()."""

    def test_resolver_uses_snapshot(self):
        """Entities registered later are invisible to an existing resolver."""
        catalog = make_catalog(SchemaEntity(name="Person"))
        resolver = catalog.resolver()

        catalog.register(SchemaEntity(name="Employee", parents=("Person",)))

        assert resolver.get_ancestors("Employee") == ["Employee"]
        assert catalog.resolver().get_ancestors("Employee") == ["Employee", "Person"]

    def test_valid_catalog(self):
        """A consistent catalog has no errors."""
        catalog = make_catalog(
            SchemaEntity(name="Person"),
            SchemaEntity(name="Employee", parents=("Person",)),
        )
        assert catalog.validate_all() == []

    def test_unknown_parent_warns_by_default(self, caplog):
        """Unknown parents are logged, not reported, when not strict."""
        catalog = make_catalog(SchemaEntity(name="Employee", parents=("Ghost",)))

        with caplog.at_level(logging.WARNING, logger="schema_catalog.schema.catalog"):
            errors = catalog.validate_all()

        assert errors == []
        assert "unknown parent 'Ghost'" in caplog.text

    def test_unknown_parent_error_when_strict(self):
        """Strict validation reports unknown parents."""
        catalog = make_catalog(SchemaEntity(name="Employee", parents=("Ghost",)), strict=True)

        errors = catalog.validate_all()

        assert errors == ["Entity 'Employee' references unknown parent 'Ghost'"]

    def test_strict_override(self):
        """strict_parents argument overrides configuration."""
        catalog = make_catalog(SchemaEntity(name="Employee", parents=("Ghost",)))
        assert len(catalog.validate_all(strict_parents=True)) == 1

    def test_reports_every_cycle(self):
        """Cycles are collected, not raised."""
        catalog = make_catalog(
            SchemaEntity(name="A", parents=("B",)),
            SchemaEntity(name="B", parents=("A",)),
            SchemaEntity(name="C", parents=("Ghost",)),
        )

        errors = catalog.validate_all(strict_parents=True)

        assert len(errors) == 3
        assert errors[0] == "Entity 'C' references unknown parent 'Ghost'"
        assert sum("Circular inheritance" in e for e in errors) == 2
