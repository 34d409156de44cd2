"""
Catalog API — Routes Package
============================

Route Inventory:
    - products.py:    POST/GET /products, GET/PUT/DELETE /products/{id}
    - categories.py:  POST/GET /categories, GET/PUT/DELETE /categories/{id}
    - health.py:      GET /health (no auth)

Routes stay thin: pull data out of the request, call a service, pick the
status code. Error statuses come from the handlers registered in main.py.
"""
