# Services package init
"""
Postboard Backend: Services Layer
===================================

What:  Business rules sitting between the routes (HTTP) and the models
       (persistence).
How:   Services receive the model registry and the response cache in their
       constructor; main.py builds one of each per application and stores
       them on `app.state`, and routes get them through dependencies.

Service Inventory:
    - UserService:  user CRUD, cached lookups, listing and stats
    - PostService:  post CRUD, publishing, status scopes and stats
    - AuthService:  register, login, tokens and password changes
    - TTLCache:     in-process response cache with prefix invalidation
    - listing:      in-memory search, filter, sort and pagination helpers
"""
