"""
FinanceAI - Source Package

A personal finance tracker: transactions, per-category budgets,
savings goals and a keyword-matched advisor chat.

DESIGN PRINCIPLES:
1. One store owns the session state and is its only writer
2. Metrics are derived on demand, never stored
3. The advisor only sees snapshots, never the store
4. Every write is auditable
5. Nothing is persisted
"""

__version__ = "1.0.0"
__author__ = "FinanceAI Team"
