"""
Storefront Backend - Route Dependencies
=========================================

What:  FastAPI dependencies that hand route handlers the services built by
       create_app().
How:   Every service lives on app.state; each getter reads it from the
       current request. Tests swap a service by assigning to app.state or
       through app.dependency_overrides.
"""

from fastapi import Request

from app.services.auth_service import AuthService
from app.services.collection_service import CollectionService
from app.services.product_service import ProductService
from app.services.upload_service import UploadService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service


def get_collection_service(request: Request) -> CollectionService:
    return request.app.state.collection_service


def get_upload_service(request: Request) -> UploadService:
    return request.app.state.upload_service
