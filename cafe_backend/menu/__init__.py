"""
Menu catalog.

Responsibilities:
- Load the café menu from the bundled seed file or from Odoo.
- Cache the loaded catalog for a configurable TTL.
- Look up categories and items, and suggest pairings for an item.
"""
