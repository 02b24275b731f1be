"""
chrono-tags - tag reconciliation engine.

Evaluates every active user against a declarative rule catalog and
converges each user's tag set to the catalog's verdict, notifying only on
committed transitions.
"""

__version__ = "0.1.0"
