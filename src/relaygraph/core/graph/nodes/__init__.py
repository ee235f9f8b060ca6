"""Node package initialization.

Exposes ready-made node actions for building workflows.
"""

from relaygraph.core.graph.nodes.llm import (
    ChatCall,
    LlmNode,
    QuestionClassifierNode,
    response_text,
)

__all__ = [
    "ChatCall",
    "LlmNode",
    "QuestionClassifierNode",
    "response_text",
]
