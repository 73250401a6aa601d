"""
Drink suggestions.

- ``engine`` scores every available menu item against a preference vector.
- ``personalization`` nudges the result towards a customer's past favorites.
"""
