"""
Models module for familyhub.

This module contains data models and schemas:
- Family record dataclasses (members, events, photos, categories, posts, memories)
- Database schemas and table definitions
- DatabaseManager: DuckDB connection and schema management
"""

from .database import DatabaseManager, create_database, get_database_manager
from .family import (
    EventType,
    FamilyEvent,
    FamilyMember,
    FamilyMemory,
    FamilyPhoto,
    FamilyPost,
    PhotoCategory,
    PhotoMemberLink,
)
from .schema import get_schema_statements, get_table_names

__all__ = [
    "EventType",
    "FamilyEvent",
    "FamilyMember",
    "FamilyMemory",
    "FamilyPhoto",
    "FamilyPost",
    "PhotoCategory",
    "PhotoMemberLink",
    "DatabaseManager",
    "create_database",
    "get_database_manager",
    "get_schema_statements",
    "get_table_names",
]
