"""
Game Catalog API — Application Package
========================================

REST API over a catalog of video games.

    ┌─────────────────────────────────────┐
    │        Routes (API Layer)           │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  GameService · Query Builder ·      │  ← orchestration, filters,
    │  Normalizer                         │    response shaping
    ├─────────────────────────────────────┤
    │  GameRepository (memory | postgres) │  ← document storage
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
