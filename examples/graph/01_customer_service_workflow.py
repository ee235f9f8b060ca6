"""
Customer Service Workflow Example

This example demonstrates:
1. Classifying a customer message with an LLM
2. Routing on the classification with a keyword dispatcher
3. Answering follow-up questions with an LLM node

The workflow:
- Classifies the message as positive feedback or a specific question
- Records positive feedback
- Answers specific questions

Requires an OpenAI API key in OPENAI_API_KEY.
"""

import asyncio

from mirascope.core import BaseMessageParam, openai

from relaygraph.core.logging import (
    configure_logging,
    LogLevel,
    LogComponent,
    Colors,
    get_logger
)
from relaygraph.core.graph import (
    StateGraph,
    GraphConfig,
    ReplaceStrategy,
    AppendStrategy,
    keyword_dispatcher,
    render_mermaid,
    START,
    END,
)
from relaygraph.core.graph.nodes import LlmNode, QuestionClassifierNode


@openai.call("gpt-4o-mini")
async def chat(messages: list[BaseMessageParam]) -> list[BaseMessageParam]:
    return messages


async def record_feedback(state):
    """Store positive feedback for the weekly report."""
    return {"feedback": state.value("input")}


def build_graph() -> StateGraph:
    graph = StateGraph(
        name="customer service",
        state_factory=lambda: {
            "input": ReplaceStrategy(),
            "classifier_output": ReplaceStrategy(),
            "feedback": AppendStrategy(),
            "output": ReplaceStrategy(),
        },
    )
    graph.add_node(
        "classifier",
        QuestionClassifierNode(
            chat=chat,
            categories=["positive", "question"],
            classification_instructions=[
                "Praise or thanks is positive",
                "Anything asking for help is a question",
            ],
        ),
    )
    graph.add_node("recorder", record_feedback)
    graph.add_node(
        "specific_question",
        LlmNode(
            chat=chat,
            system_prompt="You are a friendly customer service agent. Answer in two sentences.",
            prompt_template="Customer asks: {input}",
            fallback="Sorry, we will get back to you shortly.",
        ),
    )

    graph.add_edge(START, "classifier")
    graph.add_conditional_edges(
        "classifier",
        keyword_dispatcher("classifier_output", {"positive": "positive"}, default="question"),
        {"positive": "recorder", "question": "specific_question"},
    )
    graph.add_edge("recorder", END)
    graph.add_edge("specific_question", END)
    return graph


async def main():
    """Run the customer service workflow."""
    configure_logging(default_level=LogLevel.INFO)
    logger = get_logger(LogComponent.WORKFLOW)
    logger.info("Starting workflow...")

    graph = build_graph()
    print(f"\n{Colors.INFO}Topology:{Colors.RESET}")
    print(render_mermaid(graph))

    config = GraphConfig(max_iterations=10)
    config.logging.show_node_transitions = True
    compiled = graph.compile(config)

    try:
        for message in (
            "Thanks, the new release works great!",
            "How do I reset my password?",
        ):
            state = await compiled.invoke({"input": message})
            print(f"\n{Colors.SUCCESS}Message:{Colors.RESET} {message}")
            print(f"Classified as: {state.value('classifier_output')}")
            if state.has("output"):
                print(f"Answer: {state.value('output')}")
            if state.has("feedback"):
                print(f"Recorded feedback: {state.value('feedback')}")
    except Exception as e:
        logger.error(f"Workflow failed: {str(e)}")
        raise


if __name__ == "__main__":
    asyncio.run(main())
