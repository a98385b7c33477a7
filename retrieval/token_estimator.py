"""
Token Estimator for the Lagoon Concierge engine.

Counts tokens exactly with tiktoken for OpenAI-compatible models and
uses a character heuristic for Bedrock models.
"""

import logging
import re

import tiktoken

logger = logging.getLogger(__name__)

# Icelandic letters outside ASCII tokenize worse than plain Latin text
_ICELANDIC_CHARS = re.compile(r'[áðéíóúýþæöÁÐÉÍÓÚÝÞÆÖ]')


class TokenEstimator:
    """
    Estimates token counts.

    - openai: tiktoken cl100k_base
    - bedrock: ~4 chars/token for Latin text, ~2 chars/token for Icelandic letters
    """

    def __init__(self, provider: str = "bedrock"):
        self.provider = provider.lower()
        self._encoding = tiktoken.get_encoding("cl100k_base") if self.provider == "openai" else None

    def estimate(self, text: str) -> int:
        """
        Estimate the token count of a text.

        Args:
            text: Input text

        Returns:
            Token count (0 for empty text)
        """
        if not text:
            return 0
        if self._encoding is not None:
            return len(self._encoding.encode(text))

        special = len(_ICELANDIC_CHARS.findall(text))
        plain = len(text) - special
        return max(1, int(special / 2 + plain / 4))
