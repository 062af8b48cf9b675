"""
SessionGate — Package Initializer
==================================

What: Marks the `sessiongate` directory as a Python package.
Why:  Enables imports like `from sessiongate.config import settings`.
Who:  Used by uvicorn (`sessiongate.main:app`), pytest, and host applications
      that mount SessionGate controllers.

Architecture Note:
    SessionGate is a thin admission layer in front of controller actions:

    ┌─────────────────────────────────────┐
    │   Middleware (Dispatcher Seam)      │  ← request → action, run the gate
    ├─────────────────────────────────────┤
    │   Services (Admission Logic)        │  ← gate, registry, session store
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← actions, modes, API contracts
    ├─────────────────────────────────────┤
    │   Controllers & Routes (HTTP)       │  ← explicit action registration
    └─────────────────────────────────────┘

    The services never import Starlette request objects directly; they talk
    to a session mapping and two small collaborator interfaces. That keeps the
    decision rule testable without HTTP.
"""

__version__ = "1.0.0"
