"""
Snippetbox - Routes Package
===========================

What:  HTTP handlers for every page of the site.
How:   Each module exposes its routers; a router's `route_class` decides which
       interceptor chain wraps its handlers (see middleware/chain.py).

Route Inventory:
    - ping.py:      GET  /ping                          (standard chain)
    - pages.py:     GET  /, /about                      (dynamic chain)
    - snippets.py:  GET  /snippet/view/{id}             (dynamic chain)
                    GET  POST /snippet/create           (protected chain)
    - users.py:     GET  POST /user/signup, /user/login (dynamic chain)
                    POST /user/logout                   (protected chain)
    - account.py:   GET  /account/view                  (protected chain)
                    GET  POST /account/password/update  (protected chain)

Design Principle:
    Handlers stay thin: decode the form, call a model, render or redirect.
"""
