# Services package init
"""
Storefront Backend - Services Layer
=====================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Services accept request schemas and an AsyncSession, apply business
       rules, and return response schemas. They are built once in
       create_app(), stored on app.state, and handed to routes through
       FastAPI dependencies (app/dependencies.py).

Service Inventory:
    - CredentialCodec: AES-CTR email encryption, PBKDF2 password hashing
    - TokenIssuer: signed session tokens (JWT)
    - AuthService: signup and login
    - CatalogQuery: lenient parsing + filter/sort/paginate for GET /products
    - CategoryRegistry: JSON side file of category names
    - ProductService / CollectionService: catalog CRUD
    - FileService: upload validation and local staging
    - ImageHostService: Cloudinary signed uploads with retries
    - UploadService: stage -> upload -> cleanup workflow
"""
