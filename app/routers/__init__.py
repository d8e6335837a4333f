"""
Routers module - API endpoint handlers organized by feature.

- auth: registration and login
- users: the current user's profile
- ai: natural-language commands, inventory questions, AI settings
- batch: structured operations through the same executor
- activity: a location's audit trail
"""
