"""
Flat JSON file storage.

Responsibilities:
- Locate the database file from the environment.
- Read and write the ``{"carts": ..., "orders": ...}`` document.
- Degrade to a no-op store on read-only serverless hosts.
"""
