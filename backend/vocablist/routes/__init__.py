"""
VocabList Backend - API Routes Package
========================================

Route Inventory:
    - lists.py:    /api/lists ...            list CRUD, cover, item removal, share codes
    - items.py:    POST /api/items           add a word to several lists
    - shared.py:   /api/shared/{code} ...    resolve and import shared lists
    - assets.py:   GET /api/assets/{id}      serve cover images
    - health.py:   GET /health               document store connectivity

Routes are thin: they read the owner from X-Owner-Id, call a service and
return its result. Services come from dependencies.py so tests can override them.
"""
