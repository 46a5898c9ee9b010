"""IntakeDesk: data-access layer for law-firm intake management.

Entity store (local document, SQL or remote REST), named server actions,
a demo session stand-in and an upload shim.
"""

from .client import IntakeDeskClient, create_client

__all__ = ["IntakeDeskClient", "create_client"]
