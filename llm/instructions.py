"""
Instruction Sets for the Lagoon Concierge engine.

System instructions as an ordered mapping of stable section ids to
text, so the prompt optimizer can select sections by id instead of
searching for marker strings.
"""

import hashlib
import logging
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from conversation.errors import ConfigurationDrift

logger = logging.getLogger(__name__)


class SectionId(Enum):
    """Instruction sections, in default order."""
    IDENTITY = "identity"
    PERSONALITY = "personality"
    RESPONSE_FORMAT = "response_format"
    CRITICAL_RULES = "critical_rules"
    PRICING = "pricing"
    RITUAL = "ritual"
    CANCELLATION = "cancellation"
    BOOKING = "booking"
    LATE_ARRIVAL = "late_arrival"
    HOURS = "hours"
    GROUPS = "groups"
    TRANSPORT = "transport"
    DISCOUNTS = "discounts"
    PRODUCTS = "products"
    AMENITIES = "amenities"
    GIFT_CARDS = "gift_cards"
    AGE = "age"
    DATE_NIGHT = "date_night"
    ICELANDIC_GUIDELINES = "icelandic_guidelines"
    CONTEXT_AWARENESS = "context_awareness"
    VOICE_AND_TONE = "voice_and_tone"
    PERSONAL_LANGUAGE = "personal_language"


# Heading that introduces each section in flat instruction text
SECTION_MARKERS: Dict[SectionId, str] = {
    SectionId.IDENTITY: "IDENTITY:",
    SectionId.PERSONALITY: "PERSONALITY:",
    SectionId.RESPONSE_FORMAT: "RESPONSE FORMAT:",
    SectionId.CRITICAL_RULES: "CRITICAL RESPONSE RULES:",
    SectionId.PRICING: "PRICING GUIDELINES:",
    SectionId.RITUAL: "RITUAL GUIDELINES:",
    SectionId.CANCELLATION: "BOOKING CHANGES AND CANCELLATIONS:",
    SectionId.BOOKING: "BOOKING AND AVAILABILITY:",
    SectionId.LATE_ARRIVAL: "LATE ARRIVAL POLICY:",
    SectionId.HOURS: "OPENING HOURS GUIDELINES:",
    SectionId.GROUPS: "GROUP BOOKING INFORMATION:",
    SectionId.TRANSPORT: "TRANSPORTATION INFORMATION:",
    SectionId.DISCOUNTS: "DISCOUNT AND PROMOTION INFORMATION:",
    SectionId.PRODUCTS: "PRODUCT INFORMATION:",
    SectionId.AMENITIES: "AMENITIES GUIDELINES:",
    SectionId.GIFT_CARDS: "GIFT TICKET GUIDELINES:",
    SectionId.AGE: "AGE POLICY AND CHILDREN:",
    SectionId.DATE_NIGHT: "DATE NIGHT / SKY LAGOON FOR TWO:",
    SectionId.ICELANDIC_GUIDELINES: "ICELANDIC RESPONSE GUIDELINES:",
    SectionId.CONTEXT_AWARENESS: "CONTEXT AWARENESS:",
    SectionId.VOICE_AND_TONE: "VOICE AND TONE GUIDELINES:",
    SectionId.PERSONAL_LANGUAGE: "PERSONAL LANGUAGE REQUIREMENTS:",
}

# Sections that must exist for a partial payload to be safe
BASE_SECTIONS: Tuple[SectionId, ...] = (
    SectionId.IDENTITY,
    SectionId.CRITICAL_RULES,
)


class InstructionSet:
    """
    Immutable ordered mapping of SectionId to section text.

    When parsed from flat text the original text is kept so it can be
    returned verbatim.
    """

    def __init__(
        self,
        sections: Iterable[Tuple[SectionId, str]],
        source_text: Optional[str] = None,
        missing_markers: Optional[List[SectionId]] = None,
    ):
        self._sections: Dict[SectionId, str] = {}
        for section_id, text in sections:
            self._sections[section_id] = text.strip()
        self._source_text = source_text
        self.missing_markers = list(missing_markers or [])
        self.fingerprint = hashlib.sha1(self.full_text().encode("utf-8")).hexdigest()

    @classmethod
    def from_mapping(cls, sections: Mapping[SectionId, str]) -> "InstructionSet":
        return cls(sections.items())

    @classmethod
    def from_text(cls, text: str) -> "InstructionSet":
        """
        Parse flat instruction text using SECTION_MARKERS.

        Each section runs from its heading to the next recognised
        heading. Headings that are not found are recorded in
        missing_markers.
        """
        positions = []
        missing = []
        for section_id, marker in SECTION_MARKERS.items():
            index = text.find(marker)
            if index < 0:
                missing.append(section_id)
            else:
                positions.append((index, section_id, marker))
        positions.sort(key=lambda p: p[0])

        sections = []
        for i, (index, section_id, marker) in enumerate(positions):
            end = positions[i + 1][0] if i + 1 < len(positions) else len(text)
            sections.append((section_id, text[index + len(marker):end]))

        if missing:
            logger.debug(f"Instruction text is missing markers: {[s.value for s in missing]}")
        return cls(sections, source_text=text, missing_markers=missing)

    def get(self, section_id: SectionId) -> Optional[str]:
        return self._sections.get(section_id)

    def render(self, section_id: SectionId) -> str:
        """Section text under its heading."""
        return f"{SECTION_MARKERS[section_id]}\n{self._sections[section_id]}"

    def base_block(self) -> str:
        """
        Every section up to and including CRITICAL_RULES.

        Raises:
            ConfigurationDrift: If a base section is missing
        """
        absent = [s.value for s in BASE_SECTIONS if s not in self._sections]
        if absent:
            raise ConfigurationDrift(f"Instruction set is missing base sections {absent}")

        parts = []
        for section_id in self._sections:
            parts.append(self.render(section_id))
            if section_id == SectionId.CRITICAL_RULES:
                break
        return "\n\n".join(parts)

    def full_text(self) -> str:
        """The complete instructions, unmodified."""
        if self._source_text is not None:
            return self._source_text
        return "\n\n".join(self.render(section_id) for section_id in self._sections)

    def ids(self) -> List[SectionId]:
        return list(self._sections)

    def __contains__(self, section_id: SectionId) -> bool:
        return section_id in self._sections

    def __iter__(self) -> Iterator[SectionId]:
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)
