"""
Enhanced Node Pipeline Example

This example demonstrates:
1. Enhanced nodes that read earlier nodes' outputs by (node id, name)
2. Keeping node-local outputs apart from shared state updates
3. Streaming intermediate states and inspecting the execution context

No LLM is needed; every node is plain Python.
"""

import asyncio

from relaygraph.core.logging import configure_logging, LogLevel, Colors
from relaygraph.core.graph import (
    StateGraph,
    ExecutionContext,
    NodeIOResolver,
    NodeOutput,
    ReplaceStrategy,
    AppendStrategy,
    START,
    END,
)


async def tokenize(state, node_input):
    io = NodeIOResolver.of(node_input)
    text = io.get_input("input", str) or ""
    tokens = text.split()
    return NodeOutput(
        node_id="tokenize",
        outputs={"tokens": tokens},
        state_updates={"log": f"tokenized {len(tokens)} words"},
    )


async def count(state, node_input):
    io = NodeIOResolver.of(node_input)
    tokens = io.get_output("tokenize", "tokens", list) or []
    counts = {}
    for token in tokens:
        counts[token.lower()] = counts.get(token.lower(), 0) + 1
    return NodeOutput(
        node_id="count",
        outputs={"counts": counts},
        state_updates={"log": f"counted {len(counts)} distinct words"},
        metadata={"distinct": len(counts)},
    )


async def report(state, node_input):
    io = NodeIOResolver.of(node_input)
    counts = io.get_output("count", "counts", dict) or {}
    top = sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:3]
    return NodeOutput(
        node_id="report",
        state_updates={
            "output": ", ".join(f"{word}={n}" for word, n in top),
            "log": "built report",
        },
    )


async def main():
    configure_logging(default_level=LogLevel.WARNING)

    graph = StateGraph(
        name="word stats",
        state_factory=lambda: {
            "input": ReplaceStrategy(),
            "output": ReplaceStrategy(),
            "log": AppendStrategy(),
        },
    )
    graph.add_enhanced_node("tokenize", tokenize)
    graph.add_enhanced_node("count", count)
    graph.add_enhanced_node("report", report)
    graph.add_edge(START, "tokenize")
    graph.add_edge("tokenize", "count")
    graph.add_edge("count", "report")
    graph.add_edge("report", END)

    compiled = graph.compile()
    context = ExecutionContext()
    text = "the cat saw the dog and the dog saw the cat"

    async for state in compiled.stream({"input": text}, context=context):
        print(f"{Colors.DIM}{state.value('log', [])}{Colors.RESET}")

    print(f"\n{Colors.SUCCESS}Execution order:{Colors.RESET} {context.get_execution_order()}")
    print(f"Distinct words: {context.get_node_metadata('count')['distinct']}")
    print(f"Word counts: {context.get_latest_output('counts').value}")


if __name__ == "__main__":
    asyncio.run(main())
