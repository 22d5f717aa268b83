"""Shelter Reconcile exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class ShelterError(Exception):
    """Base exception for all Shelter Reconcile failures."""


class ShelterConfigError(ShelterError):
    """Raised for invalid runtime configuration."""


class ShelterSchemaError(ShelterError):
    """Raised when a source record set lacks a required column."""


class ShelterIngestError(ShelterError):
    """Raised for source reading and parsing failures."""


class ShelterRegistryError(ShelterError):
    """Raised when an event targets an animal missing from the registry."""


class ShelterExportError(ShelterError):
    """Raised for output table persistence failures."""


class ShelterRunSpecError(ShelterError):
    """Raised for invalid or unsupported build-spec configuration."""
