# Services package init
"""
Affiliate Tracker Backend: Services Layer
=========================================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Services take an AsyncSession plus plain arguments or request models
       and return response models; they never see a Request object.

Service Inventory:
    - AuthService:          registration, login, token issue/verification
    - PlatformService:      Platform CRUD
    - AffiliateLinkService: AffiliateLink create/list, URL and reference checks
    - MetricService:        PerformanceMetric insert/list/summary

create_app() builds one instance of each from the Settings object and
stores them on app.state (see affiliate_tracker.dependencies).
"""
