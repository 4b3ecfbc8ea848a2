"""
Demo Bank - Source Package

Persona-scoped data store for a consumer banking prototype.
Screens read invoices, transactions and invoice accounts from here and
write user edits back through it.

DESIGN PRINCIPLES:
1. Fixtures are the baseline, overrides win by identity
2. Every operation is total - degrade to empty, never crash the app
3. Personas never see each other's data
4. Dates are day offsets from a fixed anchor, never the wall clock
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Demo Bank Team"
