"""
LLM Node Implementations

This module provides node actions that call a chat model inside a graph:
- LlmNode: fills a prompt template from state and stores the answer
- QuestionClassifierNode: asks the model to pick one of a set of categories

Both build Mirascope ``BaseMessageParam`` messages and hand them to an
injected async ``chat`` callable, so any provider can be plugged in:

    ```python
    from mirascope.core import openai

    @openai.call("gpt-4o-mini")
    async def chat(messages):
        return messages

    graph.add_node("llm", LlmNode(chat=chat, prompt_template="Answer: {input}"))
    ```

The chat callable may return a string or any object with a ``content``
attribute (such as a Mirascope call response).
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional
from pydantic import BaseModel, Field, model_validator
from mirascope.core import BaseMessageParam

from relaygraph.core.logging import get_logger, log_verbose, LogComponent
from relaygraph.core.graph.actions import maybe_await
from relaygraph.core.graph.state import GraphState

logger = get_logger(LogComponent.NODES)

ChatCall = Callable[[List[BaseMessageParam]], Awaitable[Any]]


def response_text(response: Any) -> str:
    """Text of a chat response, whether a plain string or a response object."""
    content = getattr(response, "content", response)
    return "" if content is None else str(content).strip()


class LlmNode(BaseModel):
    """
    Plain node action that answers a prompt built from state.

    Attributes:
        chat: Async callable receiving the messages and returning the answer
        prompt_template: ``str.format`` template; state keys are available and
            ``{input}`` is the value of ``input_key``
        system_prompt: Optional system message sent first
        input_key: State key holding the user text
        output_key: State key the answer is written to
        fallback: Value written instead of raising when the call fails
    """
    chat: Callable[..., Any]
    prompt_template: str = Field(default="{input}")
    system_prompt: Optional[str] = None
    input_key: str = Field(default="input")
    output_key: str = Field(default="output")
    fallback: Optional[str] = None

    class Config:
        arbitrary_types_allowed = True

    def build_messages(self, state: GraphState, text: str) -> List[BaseMessageParam]:
        values = dict(state.data)
        values["input"] = text
        messages = []
        if self.system_prompt:
            messages.append(BaseMessageParam(role="system", content=self.system_prompt))
        messages.append(
            BaseMessageParam(role="user", content=self.prompt_template.format_map(values))
        )
        return messages

    async def __call__(self, state: GraphState) -> Dict[str, Any]:
        try:
            text = state.value(self.input_key) or ""
            if not text:
                raise ValueError(f"Input text under '{self.input_key}' is empty")
            messages = self.build_messages(state, text)
            log_verbose(logger, f"LLM node sending {len(messages)} message(s)")
            answer = response_text(await maybe_await(self.chat(messages)))
            return {self.output_key: answer}
        except Exception as e:
            if self.fallback is None:
                raise
            logger.warning(f"LLM call failed, using fallback '{self.fallback}': {e}")
            return {self.output_key: self.fallback}


class QuestionClassifierNode(BaseModel):
    """
    Plain node action that classifies the input text into one category.

    The model's raw answer is stored under ``output_key``; route on it with a
    conditional edge (see ``keyword_dispatcher``). Empty input or a failing
    call stores ``fallback`` instead.

    Attributes:
        chat: Async callable receiving the messages and returning the answer
        categories: Allowed category names
        classification_instructions: Extra guidance listed in the prompt
        input_text_key: State key holding the text to classify
        output_key: State key the classification is written to
        fallback: Value stored when classification is not possible
    """
    chat: Callable[..., Any]
    categories: List[str]
    classification_instructions: List[str] = Field(default_factory=list)
    input_text_key: str = Field(default="input")
    output_key: str = Field(default="classifier_output")
    fallback: str = Field(default="unknown")

    class Config:
        arbitrary_types_allowed = True

    @model_validator(mode='after')
    def validate_categories(self) -> "QuestionClassifierNode":
        if not self.categories:
            raise ValueError("QuestionClassifierNode requires at least one category")
        return self

    def build_prompt(self, input_text: str) -> str:
        parts = [
            "Please classify the following text into one of these categories: "
            + ", ".join(self.categories),
            "",
        ]
        if self.classification_instructions:
            parts.append("Instructions:")
            parts.extend(f"- {instruction}" for instruction in self.classification_instructions)
            parts.append("")
        parts.append(f"Text to classify: {input_text}")
        parts.append("")
        parts.append("Please respond with only the category name.")
        return "\n".join(parts)

    async def __call__(self, state: GraphState) -> Dict[str, Any]:
        input_text = state.value(self.input_text_key) or ""
        if not input_text:
            logger.warning(f"Nothing to classify under '{self.input_text_key}'")
            return {self.output_key: self.fallback}
        try:
            message = BaseMessageParam(role="user", content=self.build_prompt(input_text))
            label = response_text(await maybe_await(self.chat([message])))
        except Exception as e:
            logger.error(f"Classification failed: {e}")
            return {self.output_key: self.fallback}
        logger.info(f"Classified input as: {label}")
        return {self.output_key: label}
