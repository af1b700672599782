"""
Meal Claims Tracker - Source Package

A small single-user tool for recording workday meal expenses,
enforcing the daily claim cap, and exporting claims with their receipts.

DESIGN PRINCIPLES:
1. Validate before anything is written
2. Two distinct caps: per transaction on insert, per day on export
3. Storage is swappable (file documents in production, memory in tests)
4. Export output is deterministic for an unchanged store
"""

__version__ = "1.0.0"
__author__ = "Meal Claims Tracker Team"
