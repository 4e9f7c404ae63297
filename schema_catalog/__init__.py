"""
Schema Catalog - multiple-inheritance resolution for schema entities.

Answers two questions about a catalog of entities:
- What is the effective definition of one entity after merging its
  ancestors (C3 linearization)?
- What is the source-attributed union of several entities composed onto
  one target, with optional names promoted to required where any
  contributor requires them?

Example:
    >>> from schema_catalog import InheritanceResolver, MultiEntityResolver, SchemaEntity
    >>> resolver = InheritanceResolver({"Person": SchemaEntity(name="Person")})
    >>> MultiEntityResolver(resolver).resolve(["Person"]).get_input_names()
    ['Person']
"""

from .config import CatalogConfig, ObservabilityConfig, ValidationConfig
from .errors import (
    CatalogError,
    CatalogFrozenError,
    CircularInheritanceError,
    DuplicateEntityError,
    EntityDefinitionError,
    InconsistentPrecedenceError,
    InheritanceError,
    SchemaCatalogError,
)
from .schema import (
    DisplayConfig,
    EntityCatalog,
    FormConfig,
    InheritanceResolver,
    MultiEntityResolver,
    ResolvedSet,
    SchemaEntity,
    SectionDef,
    describe_hierarchy,
    describe_virtual_hierarchy,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "SchemaEntity",
    "SectionDef",
    "DisplayConfig",
    "FormConfig",
    "InheritanceResolver",
    "MultiEntityResolver",
    "ResolvedSet",
    "EntityCatalog",
    "describe_hierarchy",
    "describe_virtual_hierarchy",
    # Config
    "CatalogConfig",
    "ValidationConfig",
    "ObservabilityConfig",
    # Errors
    "SchemaCatalogError",
    "EntityDefinitionError",
    "InheritanceError",
    "CircularInheritanceError",
    "InconsistentPrecedenceError",
    "CatalogError",
    "CatalogFrozenError",
    "DuplicateEntityError",
]
