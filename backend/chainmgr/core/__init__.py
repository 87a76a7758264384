"""Core Layer — pure domain logic and boundary contracts, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Naming and progress functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: orchestrators in services/
      call these helpers between their IO steps
"""
