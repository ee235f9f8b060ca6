"""Test suite for the Relaygraph graph system.

This package contains tests for the graph execution engine, organized as:

1. State (test_state.py)
   - Key strategies and state merging
2. Node I/O (test_io.py, test_context.py, test_resolver.py)
   - NodeInput / NodeOutput models
   - Execution history bookkeeping
   - Read-only lookups from inside enhanced nodes
3. Actions (test_actions.py)
   - Action adapters and dispatchers
4. Graph building and execution (test_base.py, test_compiled.py)
   - Registration, routing, iteration cap, streaming
5. Configuration and rendering (test_config.py, test_viz.py)
6. Nodes (nodes/)
   - LLM and classifier node actions
"""
