"""
Core modules for the backup retention planner.

This package contains the cost projection engine, storage pricing
and multi-database portfolio projections.
"""
