"""
Knowledge fragments for the Lagoon Concierge engine.

The common shape for rule-matched sections and vector search matches.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class KnowledgeFragment:
    """A retrieved unit of domain knowledge."""
    type: str
    content: Any
    subtype: Optional[str] = None
    similarity: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_vector(self) -> bool:
        return self.similarity is not None

    @property
    def text(self) -> str:
        return render_content(self.content)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "subtype": self.subtype,
            "content": self.content,
            "similarity": self.similarity,
            "metadata": self.metadata,
        }


def render_content(content: Any, indent: int = 0) -> str:
    """Render nested content as indented plain text."""
    if isinstance(content, str):
        return content
    if isinstance(content, dict):
        return "\n".join(_render_dict(content, indent))
    if isinstance(content, (list, tuple)):
        pad = "  " * indent
        return "\n".join(f"{pad}- {render_content(item)}" for item in content)
    return str(content)


def _render_dict(content: Dict[str, Any], indent: int) -> List[str]:
    pad = "  " * indent
    lines = []
    for key, value in content.items():
        label = str(key).replace("_", " ")
        if isinstance(value, (dict, list, tuple)):
            lines.append(f"{pad}{label}:")
            lines.append(render_content(value, indent + 1))
        else:
            lines.append(f"{pad}{label}: {value}")
    return lines
