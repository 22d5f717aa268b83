"""Cleaned source ingestion.

This module reads per-shelter cleaned extracts and folds their rows
into the animal registry before reconciliation runs.
"""
