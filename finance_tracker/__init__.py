"""
Finance Tracker - Storage Package

The data-access layer for a personal finance tracker: salary entries,
expenses and regional expenses, stored in a relational database or
in memory behind one contract.

DESIGN PRINCIPLES:
1. One contract, interchangeable backends
2. Coerce once, at the boundary; reject what cannot be coerced
3. Storage is constructed explicitly and injected, never global
4. Every mutation is auditable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
