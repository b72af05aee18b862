# Services package init
"""
Game Catalog API — Services Layer
===================================

Service Inventory:
    - filters.py:            filter descriptors (AnyOf, Contains, Range, ...)
    - query_builder.py:      query-string parameters → descriptors, paging, sort
    - normalizer.py:         response shaping (dates, prices, image URLs)
    - repository.py:         GameRepository interface, validation, patch merge
    - memory_repository.py:  in-process backend
    - sql_repository.py:     PostgreSQL JSONB backend
    - game_service.py:       orchestration of every /api/games operation
"""
