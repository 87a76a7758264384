"""Chain Manager Package — lifecycle orchestration for multi-host ledger chains.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
