# Routes package init
"""
Game Catalog API — Routes Package
===================================

Route Inventory:
    - games.py:   /api/games                 list, create
                  /api/games/search          multi-criteria search
                  /api/games/with-dlc        games that have DLC
                  /api/games/platform/{p}    games on one platform
                  /api/games/{id}            get, replace, patch, delete
                  /api/games/{id}/...        sub-resources and property accessor
    - health.py:  GET /                      liveness banner
                  GET /health                dependency check

Handlers stay thin: parse the request, call GameService, normalize the
response. Status codes for errors come from the exception handlers in
main.py.
"""
