"""
Lokey - Lokalise translation key manager with OpenAI translations.
"""

__version__ = "1.0.0"
