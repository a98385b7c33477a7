"""
Static Content Store for the Lagoon Concierge engine.

Read-only nested domain content in several locales, addressed by
dotted section reference.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from knowledge import LOCALES

from .fragments import render_content

logger = logging.getLogger(__name__)


class StaticContentStore:
    """
    Locale-aware lookup of knowledge sections.

    A reference missing in the requested locale is served from the
    default locale.
    """

    def __init__(self, locales: Dict[str, Dict[str, Any]], default_locale: str = "en"):
        if default_locale not in locales:
            raise ValueError(f"Default locale '{default_locale}' has no content")
        self._locales = locales
        self.default_locale = default_locale

    @classmethod
    def from_default(cls) -> "StaticContentStore":
        """Store over the bundled Sky Lagoon content."""
        return cls(LOCALES, default_locale="en")

    @property
    def locales(self) -> List[str]:
        return list(self._locales)

    def resolve_locale(self, language: Optional[str]) -> str:
        return language if language in self._locales else self.default_locale

    def get(self, ref: str, locale: Optional[str] = None) -> Optional[Any]:
        """
        Look up a section.

        Args:
            ref: Dotted reference such as "policies.late_arrival"
            locale: Locale code; unknown codes use the default locale

        Returns:
            The section content, or None if no locale has it
        """
        locale = self.resolve_locale(locale)
        content = self._walk(self._locales[locale], ref)
        if content is None and locale != self.default_locale:
            content = self._walk(self._locales[self.default_locale], ref)
            if content is not None:
                logger.debug(f"Section '{ref}' missing in '{locale}', using '{self.default_locale}'")
        if content is None:
            logger.debug(f"Section '{ref}' not found")
        return content

    @staticmethod
    def _walk(tree: Dict[str, Any], ref: str) -> Optional[Any]:
        node: Any = tree
        for part in ref.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def sections(self, locale: Optional[str] = None) -> List[str]:
        """Top-level section names available in a locale, including fallbacks."""
        locale = self.resolve_locale(locale)
        names = list(self._locales[locale])
        for name in self._locales[self.default_locale]:
            if name not in names:
                names.append(name)
        return names

    def documents(self, locale: Optional[str] = None) -> Iterator[Tuple[str, str]]:
        """
        Flatten the content into (reference, text) documents.

        One document per second-level subsection, or per section when it
        has no nested mapping.
        """
        for name in self.sections(locale):
            section = self.get(name, locale)
            if isinstance(section, dict) and any(isinstance(v, dict) for v in section.values()):
                for key, value in section.items():
                    yield f"{name}.{key}", render_content({key: value})
            else:
                yield name, render_content({name: section})
