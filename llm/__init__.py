"""
LLM Orchestration Module for the Lagoon Concierge engine.

This module handles:
- Structured instruction sets and default content
- Prompt optimization and caching
- Turn orchestration
"""

from .instructions import SECTION_MARKERS, InstructionSet, SectionId
from .orchestrator import ChatOrchestrator, ChatRequest, GenerationRequest, TurnResult
from .prompt_optimizer import PromptCache, PromptOptimizer
from .prompt_templates import PromptTemplates

__all__ = [
    "ChatOrchestrator",
    "ChatRequest",
    "GenerationRequest",
    "InstructionSet",
    "PromptCache",
    "PromptOptimizer",
    "PromptTemplates",
    "SECTION_MARKERS",
    "SectionId",
    "TurnResult",
]
