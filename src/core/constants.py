"""Core constants used across Shelter Reconcile modules.

This module centralizes column names, file names and defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_OUTPUT_ROOT = Path(".shelter")
DEFAULT_NA_MARKER = "NA"
DEFAULT_SORT_BY_ID = True
DEFAULT_OUTPUT_FORMAT = "csv"
SUPPORTED_OUTPUT_FORMATS = ("csv", "parquet")

ANIMAL_FILE_STEM = "animal"
IMPOUND_FILE_STEM = "impound"
WARNINGS_FILE_NAME = "warnings.jsonl"
MANIFEST_FILE_NAME = "manifest.json"

# Cleaned-record column names shared by every source schema.
COL_REC_SOURCE = "rec_source"
COL_ANIMAL_ID = "animal_id"
COL_KIND = "kind"
COL_GENDER = "gender"
COL_NAME = "name"
COL_COLOR_1 = "color_1"
COL_COLOR_2 = "color_2"
COL_BREED_1 = "breed_1"
COL_BREED_2 = "breed_2"
COL_KENNEL = "kennel"
COL_SPAY_NEUTER = "spay_neuter"
COL_INTAKE_DATE = "intake_date"
COL_INTAKE_TYPE = "intake_type"
COL_INTAKE_SUBTYPE = "intake_subtype"
COL_INTAKE_CONDITION = "intake_condition"
COL_INTAKE_LOCATION = "intake_location"
COL_INTAKE_AGE_COUNT = "intake_age_count"
COL_INTAKE_AGE_UNITS = "intake_age_units"
COL_INTAKE_AGE = "intake_age"
COL_INTAKE_SPAY_NEUTER = "intake_spay_neuter"
COL_OUTCOME_DATE = "outcome_date"
COL_OUTCOME_TYPE = "outcome_type"
COL_OUTCOME_SUBTYPE = "outcome_subtype"
COL_OUTCOME_CONDITION = "outcome_condition"
COL_OUTCOME_SPAY_NEUTER = "outcome_spay_neuter"

ANIMAL_IDENTITY_COLUMNS = (
    COL_ANIMAL_ID,
    COL_KIND,
    COL_GENDER,
    COL_NAME,
    COL_COLOR_1,
    COL_COLOR_2,
    COL_BREED_1,
    COL_BREED_2,
)
ANIMAL_TABLE_COLUMNS = (
    COL_ANIMAL_ID,
    COL_KIND,
    COL_NAME,
    COL_GENDER,
    COL_COLOR_1,
    COL_COLOR_2,
    COL_BREED_1,
    COL_BREED_2,
)
IMPOUND_TABLE_COLUMNS = (
    COL_ANIMAL_ID,
    COL_INTAKE_DATE,
    COL_INTAKE_TYPE,
    COL_INTAKE_SUBTYPE,
    COL_INTAKE_CONDITION,
    COL_INTAKE_LOCATION,
    COL_INTAKE_AGE_COUNT,
    COL_INTAKE_AGE_UNITS,
    COL_INTAKE_AGE,
    COL_INTAKE_SPAY_NEUTER,
    COL_KENNEL,
    COL_OUTCOME_DATE,
    COL_OUTCOME_TYPE,
    COL_OUTCOME_SUBTYPE,
    COL_OUTCOME_CONDITION,
    COL_OUTCOME_SPAY_NEUTER,
)
DATE_COLUMNS = (COL_INTAKE_DATE, COL_OUTCOME_DATE)
INTEGER_COLUMNS = (COL_INTAKE_AGE_COUNT, COL_INTAKE_AGE)
SOURCE_TIMESTAMP_FORMATS = ("%m/%d/%Y %H:%M",)

WARNING_UNMATCHED_INTAKES = "Intake not matched with outcome"
WARNING_OUTCOME_OUT_OF_ORDER = "Outcome out of order"
WARNING_EXTRA_OUTCOMES = "Extra outcomes remaining"
WARNING_EMPTY_EVENT = "Event carries no values"
