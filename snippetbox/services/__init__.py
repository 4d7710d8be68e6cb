"""
Snippetbox - Models Layer
=========================

What:  Data access for snippets and users, between the handlers (HTTP) and
       the database (persistence).
How:   Each service wraps the shared async session factory and translates
       storage outcomes into the exceptions in exceptions.py.

Service Inventory:
    - SnippetService: insert / get / latest, hiding expired snippets
    - UserService:    signup, authenticate, exists, get, password update

Handlers reach them through `Application.snippets` / `Application.users`, so
tests can substitute doubles with the same methods.
"""
