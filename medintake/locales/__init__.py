# medintake/locales/__init__.py
"""Message catalogs for the Localizer, one module per locale"""

from . import en
from . import de

CATALOGS = {
    "en": en.MESSAGES,
    "de": de.MESSAGES,
}

__all__ = [
    'en',
    'de',
    'CATALOGS'
]
