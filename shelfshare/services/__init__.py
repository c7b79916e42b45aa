"""Service Layer — orchestrates pure core checks around repository IO.

Invariants:
    - Services hold no state across calls besides injected collaborators
    - Every write re-checks identity against persisted state

Design Decisions:
    - Impureim sandwich: read (IO) -> validate (pure core) -> write (IO)
"""
