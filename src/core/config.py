"""Runtime configuration model for Shelter Reconcile.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_NA_MARKER,
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_OUTPUT_ROOT,
    DEFAULT_SORT_BY_ID,
    SUPPORTED_OUTPUT_FORMATS,
)
from core.errors import ShelterConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class ShelterConfig:
    """Validated runtime configuration.

    Attributes:
        output_root: Root directory for build outputs without explicit target.
        na_marker: Missing-value marker used by CSV input and output.
        sort_by_id: Iterate animals in identifier order for reproducible rows.
        output_format: Default table file format, ``csv`` or ``parquet``.
    """

    output_root: Path
    na_marker: str = DEFAULT_NA_MARKER
    sort_by_id: bool = DEFAULT_SORT_BY_ID
    output_format: str = DEFAULT_OUTPUT_FORMAT

    @classmethod
    def from_env(cls) -> "ShelterConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ShelterConfigError: If environment values are invalid.
        """
        output_root_value = os.getenv("SHELTER_OUTPUT_ROOT", str(DEFAULT_OUTPUT_ROOT))
        na_marker = _parse_na_marker(os.getenv("SHELTER_NA_MARKER", DEFAULT_NA_MARKER))
        sort_by_id = _parse_bool("SHELTER_SORT_BY_ID", os.getenv("SHELTER_SORT_BY_ID"))
        output_format = parse_output_format(
            os.getenv("SHELTER_OUTPUT_FORMAT", DEFAULT_OUTPUT_FORMAT)
        )
        return cls(
            output_root=Path(output_root_value).expanduser().resolve(),
            na_marker=na_marker,
            sort_by_id=sort_by_id,
            output_format=output_format,
        )


def parse_output_format(raw_value: str) -> str:
    """Validate an output format name.

    Args:
        raw_value: Requested format name.

    Returns:
        Normalized lowercase format name.

    Raises:
        ShelterConfigError: If the format is unsupported.
    """
    normalized = raw_value.strip().lower()
    if normalized not in SUPPORTED_OUTPUT_FORMATS:
        raise ShelterConfigError(
            f"Unsupported output format '{raw_value}'. "
            f"Use one of: {', '.join(SUPPORTED_OUTPUT_FORMATS)}."
        )
    return normalized


def _parse_na_marker(raw_value: str) -> str:
    if not raw_value:
        raise ShelterConfigError(
            "Invalid SHELTER_NA_MARKER value: expected a non-empty string. "
            "The missing marker must differ from the empty string."
        )
    return raw_value


def _parse_bool(variable_name: str, raw_value: str | None) -> bool:
    """Parse a boolean environment value.

    Args:
        variable_name: Environment variable name for error context.
        raw_value: Raw string from environment, if set.

    Returns:
        Parsed boolean, or the default when unset.

    Raises:
        ShelterConfigError: If value is not a recognized boolean literal.
    """
    if raw_value is None:
        return DEFAULT_SORT_BY_ID
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ShelterConfigError(
        f"Invalid {variable_name} value: expected boolean, got '{raw_value}'. "
        f"Use one of: {', '.join(_TRUE_VALUES + _FALSE_VALUES)}."
    )
