"""
Split Ledger - Source Package

A shared-expense ledger for a small, fixed group: record what was bought
and who shares it, and see what everybody owes.

DESIGN PRINCIPLES:
1. Amounts are exact cents, never floats
2. Entry ids are never reused
3. Every change is persisted before the call returns
4. Rounding drift is shown, not hidden
5. Storage is swappable
"""

__version__ = "1.0.0"
