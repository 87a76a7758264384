"""Infrastructure Layer — database, logging, and external host collaborators.

Invariants:
    - Infrastructure never imports from services/
    - Blocking clients (paramiko, docker SDK, shutil) run via asyncio.to_thread

Design Decisions:
    - Each adapter satisfies a Protocol from core/collaborator_protocols.py,
      so tests swap in fakes without patching modules
"""
