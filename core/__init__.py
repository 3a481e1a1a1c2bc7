# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the asset lifecycle logic:
# - models/: Asset value types, entity slot schemas, API request models
# - services/: Object store client, reference resolver, upload coordinator,
#   cleanup executor and the record service that orders them
#
# Code in this package should NOT know about requests or routes; it only
# raises the errors defined in app/exceptions.py.
# This keeps the logic testable against in-memory stores.
# =============================================================================
