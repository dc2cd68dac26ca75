"""Core Layer - pure query translation and the storage contract, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: builders return value
      objects, the engine in services/ executes them through StorageAdapter
"""
