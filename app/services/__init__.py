"""
Services layer - Business logic goes here.
Keep services focused on specific domains (users, reports, media, relays).

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Services raise app.core.errors exceptions; routes never build error responses
- Role checks are repeated in the services that mutate reports, not only in route dependencies
"""
