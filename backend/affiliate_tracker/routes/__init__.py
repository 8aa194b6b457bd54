# Routes package init
"""
Affiliate Tracker Backend: API Routes Package
=============================================

Route Inventory:
    - auth.py:             POST /register, POST /login
    - platforms.py:        POST /platform, GET /platforms,
                           GET/PUT/DELETE /platform/{id}
    - affiliate_links.py:  POST /affiliate-link, GET /affiliate-links
    - metrics.py:          POST /performance-metric, GET /performance-metrics,
                           GET /performance-metrics/{id}/summary
    - health.py:           GET /health

Routes stay thin: read the request, call a service, wrap the result in the
response envelope. Protected routes depend on `require_auth`.
"""
