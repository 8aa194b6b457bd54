"""
Affiliate Tracker Backend: Application Package
==============================================

What: REST backend for affiliate platforms, affiliate links and click/conversion
      metrics, with user registration and bearer-token authentication.

Architecture Note:
    The backend is split into layers:

    ┌─────────────────────────────────────┐
    │     Routes + Schemas (Gateway)      │  ← HTTP, request validation, envelopes
    ├─────────────────────────────────────┤
    │      Services (Auth, Resources)     │  ← hashing, tokens, CRUD rules
    ├─────────────────────────────────────┤
    │        Models (SQLAlchemy ORM)      │  ← users, platforms, links, metrics
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← async sessions, one per request
    └─────────────────────────────────────┘

    Routes never touch the ORM directly; services never see a Request object.
"""

__version__ = "1.0.0"
