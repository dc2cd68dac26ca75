"""Services Layer - CRUD engine and engine registry.

Invariants:
    - Services orchestrate pure core builders around async storage calls
    - No SQL is written here

Design Decisions:
    - One engine instance per registered table, looked up by model name
"""
