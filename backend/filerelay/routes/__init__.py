# Routes package init
"""
FileRelay — API Routes Package
===============================

Route Inventory:
    - relay.py:   POST /process-file   (download, extract, respond or store)
    - health.py:  GET  /health         (liveness and configuration status)

Routes stay thin: they parse the request, call RelayService, and shape the
success response. Error responses come from the handlers in main.py.
"""
