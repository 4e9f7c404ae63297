"""
Unit tests for multi-entity composition.

Tests cover:
- Empty and single-entity resolution
- Deduplication and source attribution
- Required promotion across entities (both orders)
- Inherited and diamond-inherited contributions
- ResolvedSet accessors
"""

import pytest

from schema_catalog.errors import CircularInheritanceError
from schema_catalog.schema.composition import MultiEntityResolver
from schema_catalog.schema.entity import SchemaEntity
from schema_catalog.schema.inheritance import InheritanceResolver
from schema_catalog.schema.resolved import ResolvedSet


def make_composer(*entities):
    """Helper to create a MultiEntityResolver from entities."""
    return MultiEntityResolver(InheritanceResolver({e.name: e for e in entities}))


class TestResolve:
    """Tests for MultiEntityResolver.resolve."""

    def test_empty_input(self):
        """No names gives an empty result."""
        result = make_composer(SchemaEntity(name="Person")).resolve([])

        assert result.get_required_fields() == []
        assert result.get_optional_fields() == []
        assert result.get_required_sub_entities() == []
        assert result.get_optional_sub_entities() == []
        assert result.get_input_names() == []
        assert dict(result.field_sources) == {}
        assert dict(result.sub_entity_sources) == {}

    def test_single_entity(self):
        """Single entity returns its own fields, attributed to itself."""
        composer = make_composer(
            SchemaEntity(name="Person", required_fields=("FullName",), optional_fields=("Bio",))
        )

        result = composer.resolve(["Person"])

        assert result.get_required_fields() == ["FullName"]
        assert result.get_optional_fields() == ["Bio"]
        assert result.get_field_sources("FullName") == ["Person"]
        assert result.get_field_sources("Bio") == ["Person"]

    def test_single_entity_includes_sub_entities(self):
        """Sub-entities are resolved as well."""
        composer = make_composer(
            SchemaEntity(
                name="Paper",
                required_sub_entities=("Author",),
                optional_sub_entities=("Funding",),
            )
        )

        result = composer.resolve(["Paper"])

        assert result.get_required_sub_entities() == ["Author"]
        assert result.get_optional_sub_entities() == ["Funding"]
        assert result.get_sub_entity_sources("Author") == ["Paper"]

    def test_single_target_matches_effective(self):
        """resolve([X]) equals X's effective entity, attributed to X."""
        person = SchemaEntity(
            name="Person",
            required_fields=("FullName",),
            optional_fields=("Bio", "Phone"),
            optional_sub_entities=("Address",),
        )
        employee = SchemaEntity(
            name="Employee",
            parents=("Person",),
            required_fields=("Email", "Phone"),
            required_sub_entities=("Contract",),
        )
        resolver = InheritanceResolver({"Person": person, "Employee": employee})
        effective = resolver.get_effective("Employee")

        result = MultiEntityResolver(resolver).resolve(["Employee"])

        assert result.get_required_fields() == list(effective.required_fields)
        assert result.get_optional_fields() == list(effective.optional_fields)
        assert result.get_required_sub_entities() == list(effective.required_sub_entities)
        assert result.get_optional_sub_entities() == list(effective.optional_sub_entities)
        for name in result.get_all_fields():
            assert result.get_field_sources(name) == ["Employee"]
        for name in result.get_all_sub_entities():
            assert result.get_sub_entity_sources(name) == ["Employee"]

    def test_shared_field_deduplicated(self):
        """Shared fields appear once with every source."""
        composer = make_composer(
            SchemaEntity(name="Student", required_fields=("FullName", "StudentId")),
            SchemaEntity(name="Employee", required_fields=("FullName", "EmployeeId")),
        )

        result = composer.resolve(["Student", "Employee"])

        assert result.get_required_fields() == ["FullName", "StudentId", "EmployeeId"]
        assert result.get_field_sources("FullName") == ["Student", "Employee"]
        assert result.is_shared_field("FullName")
        assert not result.is_shared_field("StudentId")

    @pytest.mark.parametrize("order", [["P1", "P2"], ["P2", "P1"]])
    def test_promotion_is_order_independent(self, order):
        """Optional in one entity and required in another ends up required."""
        composer = make_composer(
            SchemaEntity(name="P1", optional_fields=("Shared",)),
            SchemaEntity(name="P2", required_fields=("Shared",)),
        )

        result = composer.resolve(order)

        assert result.get_required_fields() == ["Shared"]
        assert result.get_optional_fields() == []
        assert result.get_field_sources("Shared") == order

    @pytest.mark.parametrize("order", [["P1", "P2"], ["P2", "P1"]])
    def test_sub_entity_promotion(self, order):
        """Sub-entities are promoted the same way."""
        composer = make_composer(
            SchemaEntity(name="P1", optional_sub_entities=("Author",)),
            SchemaEntity(name="P2", required_sub_entities=("Author",)),
        )

        result = composer.resolve(order)

        assert result.get_required_sub_entities() == ["Author"]
        assert result.get_optional_sub_entities() == []
        assert result.is_shared_sub_entity("Author")

    def test_disjoint_entities_merge_everything(self):
        """Disjoint entities contribute all their names."""
        composer = make_composer(
            SchemaEntity(name="A", required_fields=("X",), optional_fields=("Y",)),
            SchemaEntity(name="B", required_fields=("Z",), optional_fields=("W",)),
        )

        result = composer.resolve(["A", "B"])

        assert result.get_required_fields() == ["X", "Z"]
        assert result.get_optional_fields() == ["Y", "W"]
        assert result.get_all_fields() == ["X", "Z", "Y", "W"]

    def test_order_follows_input_order(self):
        """Names keep first-seen order across inputs."""
        composer = make_composer(
            SchemaEntity(name="A", required_fields=("A1", "Common")),
            SchemaEntity(name="B", required_fields=("B1", "Common")),
        )

        assert composer.resolve(["B", "A"]).get_required_fields() == ["B1", "Common", "A1"]
        assert composer.resolve(["A", "B"]).get_required_fields() == ["A1", "Common", "B1"]

    def test_inherited_fields_included(self):
        """Fields inherited through ancestors are attributed to the input."""
        composer = make_composer(
            SchemaEntity(name="Person", required_fields=("FullName",)),
            SchemaEntity(name="Student", parents=("Person",), required_fields=("StudentId",)),
            SchemaEntity(name="Volunteer", optional_fields=("Hours",)),
        )

        result = composer.resolve(["Student", "Volunteer"])

        assert set(result.get_required_fields()) == {"FullName", "StudentId"}
        assert result.get_field_sources("FullName") == ["Student"]
        assert result.get_optional_fields() == ["Hours"]

    def test_diamond_contributions_deduplicated(self):
        """A shared ancestor counts once per input entity."""
        composer = make_composer(
            SchemaEntity(name="Person", required_fields=("FullName",)),
            SchemaEntity(name="Student", parents=("Person",)),
            SchemaEntity(name="Employee", parents=("Person",)),
            SchemaEntity(name="TA", parents=("Student", "Employee")),
        )

        result = composer.resolve(["TA", "Student"])

        assert result.get_required_fields() == ["FullName"]
        assert result.get_field_sources("FullName") == ["TA", "Student"]

    def test_duplicate_input_names_attributed_once(self):
        """Repeating an input does not repeat it in sources."""
        composer = make_composer(SchemaEntity(name="Person", required_fields=("FullName",)))

        result = composer.resolve(["Person", "Person"])

        assert result.get_field_sources("FullName") == ["Person"]
        assert result.get_input_names() == ["Person", "Person"]

    def test_empty_entity_contributes_nothing(self):
        """Unknown or empty entities only appear in input names."""
        composer = make_composer(SchemaEntity(name="Person", required_fields=("FullName",)))

        result = composer.resolve(["Person", "Ghost"])

        assert result.get_required_fields() == ["FullName"]
        assert result.get_input_names() == ["Person", "Ghost"]
        assert result.get_field_sources("FullName") == ["Person"]

    def test_cycle_propagates(self):
        """Graph errors in any input propagate."""
        composer = make_composer(
            SchemaEntity(name="A", parents=("B",)),
            SchemaEntity(name="B", parents=("A",)),
        )
        with pytest.raises(CircularInheritanceError):
            composer.resolve(["A"])


class TestResolvedSet:
    """Tests for ResolvedSet accessors."""

    def test_empty_factory(self):
        """empty() has no content."""
        result = ResolvedSet.empty()
        assert result.get_all_fields() == []
        assert result.get_all_sub_entities() == []
        assert result.get_input_names() == []

    def test_unknown_sources_are_empty(self):
        """Sources for an unknown name are empty."""
        result = ResolvedSet.empty()
        assert result.get_field_sources("Nope") == []
        assert result.get_sub_entity_sources("Nope") == []
        assert not result.is_shared_field("Nope")
        assert not result.is_shared_sub_entity("Nope")

    def test_accessors_return_copies(self):
        """Mutating returned lists does not change the set."""
        result = ResolvedSet(
            required_fields=("A",),
            field_sources={"A": ["X"]},
            input_names=("X",),
        )

        result.get_required_fields().append("B")
        result.get_field_sources("A").append("Y")

        assert result.get_required_fields() == ["A"]
        assert result.get_field_sources("A") == ["X"]

    def test_sources_are_read_only(self):
        """The source mapping cannot be modified."""
        result = ResolvedSet(field_sources={"A": ["X"]})
        with pytest.raises(TypeError):
            result.field_sources["B"] = ("Y",)

    def test_to_dict(self):
        """to_dict exposes both namespaces."""
        result = ResolvedSet(
            required_fields=("A",),
            optional_fields=("B",),
            field_sources={"A": ["X"], "B": ["X"]},
            optional_sub_entities=("S",),
            sub_entity_sources={"S": ["X"]},
            input_names=("X",),
        )

        d = result.to_dict()

        assert d["input_names"] == ["X"]
        assert d["fields"] == {
            "required": ["A"],
            "optional": ["B"],
            "sources": {"A": ["X"], "B": ["X"]},
        }
        assert d["sub_entities"]["optional"] == ["S"]
