"""Intake and outcome reconciliation.

This module pairs each animal's accumulated events into impound
episodes and reports discrepancies as structured warnings.
"""
