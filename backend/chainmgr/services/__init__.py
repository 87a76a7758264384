"""Services Layer — registries and lifecycle orchestrators.

Invariants:
    - Registries take an AsyncSession and never commit on their own
    - Orchestrators own transaction boundaries (one session per atomic phase)

Design Decisions:
    - One file per registry/orchestrator for locality
"""
