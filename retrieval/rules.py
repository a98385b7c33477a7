"""
Knowledge Rules for the Lagoon Concierge engine.

Declarative table mapping message patterns to knowledge sections.
Rule data lives here; matching logic lives in rule_matcher.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern, Tuple

from conversation.models import SessionContext

Predicate = Callable[[str, SessionContext], bool]


@dataclass(frozen=True)
class Rule:
    """
    One retrieval rule.

    A rule matches when its pattern (if any) is found in the message and
    its predicate (if any) accepts the message and context.
    """
    name: str
    sections: Tuple[str, ...]
    fragment_type: str
    pattern: Optional[Pattern] = None
    predicate: Optional[Predicate] = None
    subtype: Optional[str] = None
    exclusive: bool = False
    priority: int = 0

    def matches(self, message: str, context: SessionContext) -> bool:
        if self.pattern is None and self.predicate is None:
            return False
        if self.pattern is not None and not self.pattern.search(message):
            return False
        if self.predicate is not None and not self.predicate(message, context):
            return False
        return True


def _words(*terms: str) -> Pattern:
    return re.compile(r'\b(' + '|'.join(terms) + r')\b', re.IGNORECASE)


COMPARISON_TERMS = _words(
    r"difference", r"differences", r"differ", r"compare\w*", r"comparison", r"versus", r"vs",
    r"better", r"munur\w*", r"muninn", r"mismun\w*", r"samanbur\w*",
)
OFFERING_TERMS = _words(
    r"packages?", r"saman", r"s[ée]r", r"pass(es)?", r"changing", r"private", r"public",
    r"facilit\w*", r"pakk\w*", r"klef\w*",
)
LATE_TERMS = _words(
    r"late", r"running late", r"delay\w*", r"traffic", r"won'?t make it", r"behind schedule",
    r"sein\w*", r"t[oö]f\w*", r"tefst",
)


def _is_comparison(message: str, context: SessionContext) -> bool:
    return bool(COMPARISON_TERMS.search(message) and OFFERING_TERMS.search(message))


def _is_late_arrival(message: str, context: SessionContext) -> bool:
    return bool(LATE_TERMS.search(message)) or context.late_arrival_context.is_late


# Evaluated in descending priority; exclusive rules suppress all others
RULES: List[Rule] = [
    Rule(
        name="offering_comparison",
        sections=("packages", "facilities.changing_rooms"),
        fragment_type="packages",
        subtype="comparison",
        predicate=_is_comparison,
        exclusive=True,
        priority=100,
    ),
    Rule(
        name="late_arrival",
        sections=("policies.late_arrival", "booking_modifications"),
        fragment_type="policies",
        subtype="late_arrival",
        predicate=_is_late_arrival,
        priority=90,
    ),
    Rule(
        name="booking_modification",
        sections=("booking_modifications", "policies.cancellation"),
        fragment_type="booking_modifications",
        pattern=_words(
            r"change", r"chang\w+", r"modify", r"reschedul\w*", r"cancel\w*", r"refund\w*",
            r"postpone", r"breyt\w*", r"afb[oó]k\w*", r"endurgrei[ðd]\w*",
        ),
        priority=85,
    ),
    Rule(
        name="pricing",
        sections=("packages",),
        fragment_type="packages",
        pattern=_words(
            r"prices?", r"pricing", r"costs?", r"how much", r"expensive", r"cheap\w*",
            r"isk", r"kr", r"ver[ðd]\w*", r"kosta\w*",
        ),
        priority=80,
    ),
    Rule(
        name="packages",
        sections=("packages",),
        fragment_type="packages",
        pattern=_words(
            r"packages?", r"saman", r"s[ée]r", r"pure", r"for two", r"date night", r"pakk\w*",
            r"stefnum[oó]t\w*",
        ),
        priority=75,
    ),
    Rule(
        name="ritual",
        sections=("ritual",),
        fragment_type="ritual",
        pattern=_words(
            r"ritual", r"rit[uú]al\w*", r"skj[oó]l", r"steps?", r"sauna", r"cold plunge", r"scrub",
            r"skref\w*",
        ),
        priority=70,
    ),
    Rule(
        name="opening_hours",
        sections=("opening_hours", "seasonal_information"),
        fragment_type="opening_hours",
        pattern=_words(
            r"hours?", r"open\w*", r"clos\w*", r"last entry", r"opi[ðn]\w*", r"loka\w*",
            r"afgrei[ðd]slut[ií]m\w*",
        ),
        priority=65,
    ),
    Rule(
        name="transportation",
        sections=("transportation",),
        fragment_type="transportation",
        pattern=_words(
            r"bus", r"buses", r"shuttle", r"transport\w*", r"transfer", r"parking", r"get there",
            r"taxi", r"airport", r"directions", r"bs[ií]", r"str[aæ]t[oó]", r"r[uú]t\w*",
        ),
        priority=60,
    ),
    Rule(
        name="dining",
        sections=("dining",),
        fragment_type="dining",
        pattern=_words(
            r"restaurant", r"food", r"eat\w*", r"drinks?", r"bar", r"menu", r"caf[eé]", r"smakk",
            r"keimur", r"gelmir", r"vegan", r"gluten", r"matur\w*", r"veitinga\w*",
        ),
        priority=55,
    ),
    Rule(
        name="facilities",
        sections=("facilities",),
        fragment_type="facilities",
        pattern=_words(
            r"facilit\w*", r"changing", r"showers?", r"lockers?", r"towels?", r"robes?",
            r"wheelchair", r"accessib\w*", r"b[uú]ningsklef\w*", r"a[ðd]gengi\w*",
        ),
        priority=50,
    ),
    Rule(
        name="gift_tickets",
        sections=("gift_tickets",),
        fragment_type="gift_tickets",
        pattern=_words(r"gift\w*", r"vouchers?", r"gjafa\w*"),
        priority=45,
    ),
    Rule(
        name="age_policy",
        sections=("age_policy",),
        fragment_type="age_policy",
        pattern=_words(
            r"age", r"ages", r"old", r"child", r"children", r"kids?", r"teen\w*", r"minimum age",
            r"aldur\w*", r"b[oö]rn\w*", r"barn\w*",
        ),
        priority=40,
    ),
    Rule(
        name="group_bookings",
        sections=("group_bookings",),
        fragment_type="group_bookings",
        pattern=_words(r"groups?", r"team", r"corporate", r"company", r"h[oó]p\w*"),
        priority=35,
    ),
    Rule(
        name="weather",
        sections=("weather_policy", "seasonal_information"),
        fragment_type="weather_policy",
        pattern=_words(
            r"weather", r"rain\w*", r"snow\w*", r"wind\w*", r"storm\w*", r"northern lights",
            r"aurora", r"ve[ðd]ur\w*", r"rigning\w*",
        ),
        priority=30,
    ),
    Rule(
        name="multi_pass",
        sections=("multi_pass",),
        fragment_type="multi_pass",
        pattern=_words(r"multi[- ]?pass\w*", r"several visits", r"multiple visits", r"hef[ðd]", r"venja"),
        priority=25,
    ),
    Rule(
        name="products",
        sections=("products",),
        fragment_type="products",
        pattern=_words(r"products?", r"shop", r"souvenirs?", r"lotion", r"skin ?care", r"v[oö]rur"),
        priority=20,
    ),
    Rule(
        name="website_links",
        sections=("website_links",),
        fragment_type="website_links",
        pattern=_words(r"website", r"link", r"url", r"vefs[ií][ðd]\w*", r"hlekk\w*"),
        priority=10,
    ),
    Rule(
        name="policies",
        sections=("policies",),
        fragment_type="policies",
        pattern=_words(
            r"polic(y|ies)", r"rules?", r"swimsuit", r"swimwear", r"phones?", r"camera",
            r"pregnan\w*", r"alcohol", r"reglur",
        ),
        priority=5,
    ),
]
