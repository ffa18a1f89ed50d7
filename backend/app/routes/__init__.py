# Routes package init
"""
Postboard Backend: API Routes Package
=======================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each module owns one resource and exposes an APIRouter that main.py
       mounts.

Route Inventory:
    - auth.py:    /api/auth/register, /login, /me, /refresh, /logout, /password
    - users.py:   /api/users CRUD and /api/users/{id}/posts
    - posts.py:   /api/posts CRUD, /published, /drafts, /{id}/publish
    - stats.py:   /api/stats/users, /api/stats/posts
    - health.py:  GET /health

Routes stay thin: parse the request, call a service, wrap the result in the
success envelope. Errors travel as exceptions to the handlers in main.py.
"""
