"""
Static domain content for the Lagoon Concierge engine.
"""

from .content_en import CONTENT as CONTENT_EN
from .content_is import CONTENT as CONTENT_IS

LOCALES = {
    "en": CONTENT_EN,
    "is": CONTENT_IS,
}

__all__ = ["CONTENT_EN", "CONTENT_IS", "LOCALES"]
