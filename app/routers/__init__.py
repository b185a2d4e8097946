"""
Routers module - API endpoint handlers organized by feature.

Each router handles a specific domain of the API:
- google_auth: "Sign in with Google" login and callback
- users: the signed-in user's profile
- calendar_mux: calendar mux CRUD
"""
