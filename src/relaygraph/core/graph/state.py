"""State management for the graph system.

This module provides:
1. KeyStrategy: How a new value for a key is merged with the existing one
2. ReplaceStrategy / AppendStrategy / MergeStrategy: The built-in strategies
3. GraphState: The key/value container threaded through one invocation
4. StateFactory: The callable a graph uses to seed each fresh GraphState
"""

from typing import Dict, Any, Callable, Mapping, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class KeyStrategy:
    """Merge rule for a single state key.

    Subclasses implement ``apply`` which receives the current value (``None``
    when the key has never been written) and the incoming value, and returns
    the value to store.
    """

    def apply(self, old_value: Any, new_value: Any) -> Any:
        raise NotImplementedError("Subclasses must implement apply()")

    def __call__(self, old_value: Any, new_value: Any) -> Any:
        return self.apply(old_value, new_value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ReplaceStrategy(KeyStrategy):
    """Last write wins."""

    def apply(self, old_value: Any, new_value: Any) -> Any:
        return new_value


class AppendStrategy(KeyStrategy):
    """Accumulate values into a list.

    A list (or tuple) update is concatenated, anything else is appended as a
    single element. ``None`` updates leave the list untouched.
    """

    def apply(self, old_value: Any, new_value: Any) -> Any:
        if old_value is None:
            current = []
        elif isinstance(old_value, list):
            current = list(old_value)
        else:
            current = [old_value]

        if new_value is None:
            return current
        if isinstance(new_value, (list, tuple)):
            current.extend(new_value)
        else:
            current.append(new_value)
        return current


class MergeStrategy(KeyStrategy):
    """Shallow dict merge, the incoming keys win."""

    def apply(self, old_value: Any, new_value: Any) -> Any:
        if isinstance(old_value, Mapping) and isinstance(new_value, Mapping):
            return {**old_value, **new_value}
        return new_value


DEFAULT_STRATEGY = ReplaceStrategy()

StateFactory = Callable[[], Dict[str, KeyStrategy]]


class GraphState(BaseModel):
    """
    Mutable key/value store shared by the nodes of one invocation.

    Every write goes through ``update_state`` which merges per key with the
    registered strategy. Keys that were never registered are replaced.

    Attributes:
        data: Current values by key
        strategies: Merge strategy by key
        created_at: Time of state creation
        updated_at: Time of last state modification
    """
    data: Dict[str, Any] = Field(default_factory=dict)
    strategies: Dict[str, KeyStrategy] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        arbitrary_types_allowed = True

    @classmethod
    def from_factory(
        cls,
        state_factory: Optional[StateFactory] = None,
        inputs: Optional[Mapping[str, Any]] = None
    ) -> "GraphState":
        """Create a state with the factory's strategies and apply ``inputs`` as the first update."""
        state = cls()
        if state_factory is not None:
            for key, strategy in (state_factory() or {}).items():
                state.register_key_and_strategy(key, strategy)
        if inputs:
            state.update_state(inputs)
        return state

    def register_key_and_strategy(self, key: str, strategy: KeyStrategy) -> None:
        """Register the merge strategy used for ``key``."""
        self.strategies[key] = strategy

    def strategy_for(self, key: str) -> KeyStrategy:
        return self.strategies.get(key, DEFAULT_STRATEGY)

    def update_state(self, updates: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Merge a partial update into the state.

        Args:
            updates: Mapping of key to new value, ``None`` means nothing to merge

        Returns:
            The state's data after the merge
        """
        if not updates:
            return self.data
        for key, new_value in updates.items():
            strategy = self.strategy_for(key)
            self.data[key] = strategy.apply(self.data.get(key), new_value)
        self._update_timestamp()
        return self.data

    def value(self, key: str, default: Any = None) -> Any:
        """Get the current value of ``key`` or ``default`` when unset."""
        return self.data.get(key, default)

    def has(self, key: str) -> bool:
        return key in self.data

    def snapshot(self) -> "GraphState":
        """Copy of this state whose data dict is independent of the original."""
        return GraphState(
            data=dict(self.data),
            strategies=dict(self.strategies),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.data)

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def _update_timestamp(self) -> None:
        """Update the last modified timestamp."""
        object.__setattr__(self, "updated_at", datetime.utcnow())
