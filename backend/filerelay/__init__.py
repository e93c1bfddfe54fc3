"""
FileRelay — Application Package Initializer
============================================

What: Marks the `filerelay` directory as a Python package.
Why:  Enables module imports like `from filerelay.config import get_settings`.
Who:  Used by uvicorn (`filerelay.main:app`), pytest, and the console script.

Architecture Note:
    The service is a single pipeline split into thin layers:

    ┌─────────────────────────────────────┐
    │        Routes (POST /process-file)  │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   RelayService (pipeline owner)     │  ← validate → fetch → stage → forward → publish
    ├─────────────────────────────────────┤
    │  Fetch / File / Extraction / Storage│  ← one service per external boundary
    └─────────────────────────────────────┘

    Each service raises typed exceptions from `filerelay.exceptions`; only
    `filerelay.main` turns them into HTTP responses.
"""

__version__ = "1.0.0"
