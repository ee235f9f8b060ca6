"""Tests for graph configuration functionality.

This module tests the graph configuration system including:
- Default values
- Validation of limits
- Copy-on-compile behaviour
"""

import pytest
from pydantic import ValidationError

from relaygraph.core.graph.base import StateGraph
from relaygraph.core.graph.config import DEFAULT_MAX_ITERATIONS, GraphConfig
from relaygraph.core.logging import RelayLoggingConfig


@pytest.fixture
def basic_config() -> GraphConfig:
    """Fixture providing a basic graph configuration."""
    return GraphConfig()


class TestConfigInitialization:
    """Test suite for configuration initialization."""

    def test_defaults(self, basic_config: GraphConfig):
        """Test default configuration values."""
        assert basic_config.max_iterations == DEFAULT_MAX_ITERATIONS == 100
        assert basic_config.collect_history is False
        assert basic_config.history_limit == 50
        assert isinstance(basic_config.logging, RelayLoggingConfig)

    def test_config_with_values(self):
        """Test configuration initialization with custom values."""
        config = GraphConfig(max_iterations=5, collect_history=True, history_limit=2)
        assert config.max_iterations == 5
        assert config.collect_history is True
        assert config.history_limit == 2

    @pytest.mark.parametrize("field", ["max_iterations", "history_limit"])
    def test_limits_must_be_positive(self, field: str):
        """Test that zero limits are rejected."""
        with pytest.raises(ValidationError):
            GraphConfig(**{field: 0})


class TestConfigOnCompile:
    """Test suite for how compile treats configuration."""

    def test_compile_copies_config(self, basic_config: GraphConfig):
        """Test that compiling copies the configuration."""
        compiled = StateGraph().compile(basic_config)
        compiled.max_iterations = 7
        assert basic_config.max_iterations == DEFAULT_MAX_ITERATIONS
        assert compiled.config.max_iterations == 7

    def test_compile_max_iterations_shortcut(self):
        """Test the max_iterations override on compile."""
        compiled = StateGraph().compile(GraphConfig(max_iterations=10), max_iterations=3)
        assert compiled.max_iterations == 3

    def test_setter_rejects_zero(self):
        """Test that the compiled cap setter rejects zero."""
        compiled = StateGraph().compile()
        with pytest.raises(ValueError):
            compiled.max_iterations = 0

    def test_compile_rejects_cap_below_one(self):
        """Test that compile rejects a max_iterations below one."""
        with pytest.raises(ValueError):
            StateGraph().compile(max_iterations=0)
        with pytest.raises(ValueError):
            StateGraph().compile(max_iterations=-1)
