"""
Services module for familyhub.

This module contains the service classes that talk to the backend:
- CloudIAPAuthService: Cloud IAP authentication and the development user
- StorageService: Google Cloud Storage uploads, public URLs and database backups
- FamilyDataService: record reads and writes with tagged fetch results
"""

from .auth import CloudIAPAuthService, UserInfo
from .family_data import FamilyDataService, FetchResult, get_family_data_service
from .storage import StorageService, get_storage_service

__all__ = [
    "CloudIAPAuthService",
    "UserInfo",
    "FamilyDataService",
    "FetchResult",
    "get_family_data_service",
    "StorageService",
    "get_storage_service",
]
