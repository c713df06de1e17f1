# Airtable Reader — paginated table fetches
"""
Airtable Reader module: fetches every record of a table as Row objects,
in string or raw cell format.
"""

from .client import AirtableClient
from .models import CellFormat, Row

__all__ = [
    "AirtableClient",
    "CellFormat",
    "Row",
]
