"""Hebrew-specific helpers.

This module provides:
- Airtable column names of the Hebrew agents directory (fields_he.py)
- Hebrew-aware name ordering (collation.py)
"""

from .fields_he import AGENT_FIELDS, SPECIALIZATION_FIELDS, FORBIDDEN_BLOCK_STATUS
from .collation import hebrew_sort_key, sort_by_name

__all__ = [
    'AGENT_FIELDS',
    'SPECIALIZATION_FIELDS',
    'FORBIDDEN_BLOCK_STATUS',
    'hebrew_sort_key',
    'sort_by_name',
]
