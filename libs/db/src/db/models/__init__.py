"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the bank ledger models used by ``statement_import``.
"""

from .ledger import Base, SiBankAccount, SiTransaction

__all__ = [
    "Base",
    "SiBankAccount",
    "SiTransaction",
]
