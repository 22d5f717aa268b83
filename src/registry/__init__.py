"""Canonical animal registry.

This module keeps one merged record per animal identifier together
with the intake and outcome events accumulated for that animal.
"""
