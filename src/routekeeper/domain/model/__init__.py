"""Public domain model surface."""

from __future__ import annotations

from routekeeper.domain.model.associations import (
    Association,
    AssociationDefaults,
    AssociationSpec,
    Capabilities,
)
from routekeeper.domain.model.catalog import Catalog, CatalogEntry, Model, Provider
from routekeeper.domain.model.enums import AliasProvenance, CatalogSource
from routekeeper.domain.model.template import ManualAlias, ModelTemplate, TemplateItem

__all__ = [
    "AliasProvenance",
    "Association",
    "AssociationDefaults",
    "AssociationSpec",
    "Capabilities",
    "Catalog",
    "CatalogEntry",
    "CatalogSource",
    "ManualAlias",
    "Model",
    "ModelTemplate",
    "Provider",
    "TemplateItem",
]
