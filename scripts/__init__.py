"""
Scripts for PillTracker
Utility scripts for seeding development data
"""

from .seed_data import seed_all, create_tables

__all__ = [
    "seed_all",
    "create_tables"
]
