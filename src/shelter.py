"""Public SDK surface for Shelter Reconcile.

This module provides a stable import path for library users.
It re-exports the primary client, pipeline entry points and typed models.
"""

from __future__ import annotations

from core.config import ShelterConfig
from core.types import (
    AnimalSnapshot,
    ImpoundEpisode,
    IngestReport,
    IntakeEvent,
    OutcomeEvent,
    ReconciliationWarning,
    SourceSchema,
    SourceSpec,
)
from ingest.pipeline import BuildResult, ShelterBuildRunner, build_tables, build_tables_from_rows
from reconcile.engine import reconcile_animal, reconcile_registry
from registry.animal_registry import AnimalRecord, AnimalRegistry
from store.shelter_sdk import BuildSummary, ShelterClient
from store.table_materializer import ShelterTables, materialize_tables

__all__ = [
    "AnimalRecord",
    "AnimalRegistry",
    "AnimalSnapshot",
    "BuildResult",
    "BuildSummary",
    "ImpoundEpisode",
    "IngestReport",
    "IntakeEvent",
    "OutcomeEvent",
    "ReconciliationWarning",
    "ShelterBuildRunner",
    "ShelterClient",
    "ShelterConfig",
    "ShelterTables",
    "SourceSchema",
    "SourceSpec",
    "build_tables",
    "build_tables_from_rows",
    "materialize_tables",
    "reconcile_animal",
    "reconcile_registry",
]
