"""Bulk ticket-creation engine."""

from ticketbridge.core.bulk_create.engine import BulkCreateEngine, CreateFields, extract_create_fields
from ticketbridge.core.bulk_create.lookup import CreateLookup

__all__ = ["BulkCreateEngine", "CreateFields", "CreateLookup", "extract_create_fields"]
