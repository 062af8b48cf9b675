"""
SessionGate — Routes Package
=============================

Route Inventory:
    - account.py: reference controller (index / login / logout), gated
    - health.py:  GET /health, never gated
"""
