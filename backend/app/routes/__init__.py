# Routes package init
"""
Storefront Backend - API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource.

Route Inventory:
    - auth.py:         POST /auth/signup, POST /auth/login
    - products.py:     POST /product, GET /product/categories, GET /products,
                       GET|PUT|DELETE /product/{id}
    - collections.py:  POST /collection, GET /collections,
                       GET|PUT|DELETE /collection/{id}
    - upload.py:       POST /upload/image
    - health.py:       GET|POST /health

Routes stay thin: extract inputs, call a service, return its schema.
Business rules live in app/services.
"""
