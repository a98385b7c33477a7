"""
Rule Matcher for the Lagoon Concierge engine.

Evaluates the declarative rule table against a message and turns
matched sections into knowledge fragments. Pure: the same message and
context always give the same fragments in the same order.
"""

import logging
from typing import Any, List, Optional, Sequence

from conversation.models import SessionContext

from .content_store import StaticContentStore
from .fragments import KnowledgeFragment
from .rules import RULES, Rule

logger = logging.getLogger(__name__)


class RuleMatcher:
    """
    Deterministic keyword retrieval.

    - Rules are evaluated in descending priority (table order breaks ties)
    - If any exclusive rule matches, only the top one contributes
    - Otherwise every matching rule contributes one fragment,
      de-duplicated by (type, subtype)
    """

    def __init__(self, store: StaticContentStore, rules: Optional[Sequence[Rule]] = None):
        self.store = store
        self.rules = sorted(rules if rules is not None else RULES, key=lambda r: -r.priority)

    def match(self, message: str, context: SessionContext) -> List[KnowledgeFragment]:
        """
        Match a message against the rule table.

        Args:
            message: User message
            context: Session context (language selects the locale)

        Returns:
            Fragments in rule priority order
        """
        matched = [rule for rule in self.rules if rule.matches(message, context)]
        exclusive = [rule for rule in matched if rule.exclusive]
        selected = exclusive[:1] if exclusive else matched

        locale = self.store.resolve_locale(context.language)
        fragments: List[KnowledgeFragment] = []
        seen = set()

        for rule in selected:
            key = (rule.fragment_type, rule.subtype)
            if key in seen:
                continue
            content = self._content(rule, locale)
            if content is None:
                logger.warning(f"Rule '{rule.name}' references missing sections {rule.sections}")
                continue
            seen.add(key)
            fragments.append(KnowledgeFragment(
                type=rule.fragment_type,
                subtype=rule.subtype,
                content=content,
                metadata={"rule": rule.name, "sections": list(rule.sections), "locale": locale},
            ))

        if fragments:
            logger.debug(f"Rules matched: {[f.metadata['rule'] for f in fragments]}")
        return fragments

    def _content(self, rule: Rule, locale: str) -> Optional[Any]:
        if len(rule.sections) == 1:
            return self.store.get(rule.sections[0], locale)

        content = {}
        for ref in rule.sections:
            section = self.store.get(ref, locale)
            if section is not None:
                content[ref] = section
        return content or None
