"""
Backup retention cost planner.

Projects the storage cost of database backup retention policies over time.
"""

__version__ = "0.1.0"
