"""
Order placement and tracking.

- ``store``: per-user orders mirrored to the JSON database.
- ``service``: checkout from the cart plus best-effort Odoo sync.
- ``status``: display metadata for each order status.
"""
