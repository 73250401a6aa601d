"""
Odoo ERP bridge.

Responsibilities:
- Read Odoo connection settings from the environment.
- Talk to Odoo over JSON-RPC (authenticate, execute_kw).
- Mirror website orders into Odoo as sale orders and POS orders.
- Turn raw Odoo failures into short, human-readable warnings.
"""
