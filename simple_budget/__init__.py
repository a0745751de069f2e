"""
SimpleBudget - Source Package

A local personal-finance tracker: accounts, transactions, monthly budgets
and savings goals, with dashboards derived from them.

DESIGN PRINCIPLES:
1. Store → compute → render, in one direction
2. Derived figures are never persisted
3. Nothing is written without validation
4. Every write is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SimpleBudget Team"
