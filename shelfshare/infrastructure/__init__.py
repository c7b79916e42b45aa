"""Infrastructure — IO adapters: database sessions, repositories, logging.

Invariants:
    - Repositories implement the Protocols in core/repository_protocols.py
    - Repositories return core records, never ORM instances

Design Decisions:
    - One store module per aggregate: the loan ledger and the review gate only see
      the narrow Protocol surface they need
"""
