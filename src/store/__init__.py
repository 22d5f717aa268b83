"""Relation materialization and output layer.

This module turns reconciled registries into Arrow tables and persists
them with their warning trail and build manifest for the SDK.
"""
