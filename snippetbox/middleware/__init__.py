"""
Snippetbox - Middleware Package
===============================

What:  Request processing stages, grouped into three declared chains
       (see chain.py).

Standard chain (every request, Starlette middleware):
    Request → [Recover panic] → [Request logging] → [Secure headers] → Router

Dynamic chain (route-scoped interceptors on pages that use sessions):
    → [Session load/save] → [CSRF check] → [Authenticate] → Handler

Protected chain (dynamic chain plus a login gate):
    → [Session load/save] → [CSRF check] → [Authenticate] → [Require login] → Handler
"""
