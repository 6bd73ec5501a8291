"""
Language model module for translation and copy assistance
"""

from .translator import Translator, language_name

__all__ = ["Translator", "language_name"]
