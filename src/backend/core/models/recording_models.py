"""Data models for the recording session state machine."""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Dict, List, Optional, Any, Mapping, Tuple
from enum import Enum
from types import MappingProxyType


DEFAULT_VIEWPORT_WIDTH = 1920
DEFAULT_VIEWPORT_HEIGHT = 1080

# Keys the ledger assigns itself; never taken from a caller payload.
RESERVED_STEP_KEYS = ("id", "timestamp")


class HealingStrategy(Enum):
    """Locator re-resolution techniques available to the healing engine."""
    ATTRIBUTE_MATCHING = "attribute_matching"
    TEXT_CONTENT_MATCHING = "text_content_matching"
    POSITIONAL_MATCHING = "positional_matching"
    VISUAL_MATCHING = "visual_matching"
    SEMANTIC_MATCHING = "semantic_matching"


class SessionStatus(Enum):
    """Lifecycle status derived from the recording flags."""
    IDLE = "idle"
    RECORDING = "recording"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass(frozen=True)
class Viewport:
    """Browser viewport dimensions used when the test is replayed."""
    width: int = DEFAULT_VIEWPORT_WIDTH
    height: int = DEFAULT_VIEWPORT_HEIGHT

    def to_dict(self) -> Dict[str, int]:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class TestMetadata:
    """Metadata captured for a generated test draft."""
    __test__ = False

    url: str
    created_at: datetime
    last_modified: datetime
    viewport: Viewport = field(default_factory=Viewport)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "viewport": self.viewport.to_dict(),
            "created_at": self.created_at.isoformat(),
            "last_modified": self.last_modified.isoformat()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TestMetadata':
        """Create metadata from dictionary."""
        return cls(
            url=data["url"],
            viewport=Viewport(**data.get("viewport", {})),
            created_at=datetime.fromisoformat(data["created_at"]),
            last_modified=datetime.fromisoformat(data["last_modified"])
        )


@dataclass(frozen=True)
class GeneratedTest:
    """The test draft being authored by the current recording session.

    ``id`` and ``metadata.created_at`` are fixed at creation. The ``steps`` and
    ``assertions`` lists are draft placeholders filled in by the code
    generator; the recorded steps themselves live on the session.
    """
    __test__ = False

    id: str
    name: str
    description: str
    metadata: TestMetadata
    steps: Tuple[Dict[str, Any], ...] = ()
    assertions: Tuple[Dict[str, Any], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "steps": [dict(s) for s in self.steps],
            "assertions": [dict(a) for a in self.assertions],
            "metadata": self.metadata.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GeneratedTest':
        """Create a test draft from dictionary."""
        return cls(
            id=data["id"],
            name=data["name"],
            description=data["description"],
            metadata=TestMetadata.from_dict(data["metadata"]),
            steps=tuple(dict(s) for s in data.get("steps", [])),
            assertions=tuple(dict(a) for a in data.get("assertions", []))
        )


@dataclass(frozen=True)
class TestStep:
    """One observed user action.

    The action payload (selector, action kind, value, ...) belongs to the
    capture layer and is kept as an opaque mapping. Only ``id`` and
    ``timestamp`` (epoch milliseconds) are assigned by the ledger.
    """
    __test__ = False

    id: str
    timestamp: int
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))

    def __getitem__(self, key: str) -> Any:
        if key == "id":
            return self.id
        if key == "timestamp":
            return self.timestamp
        return self.payload[key]

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def merged(self, updates: Mapping[str, Any]) -> 'TestStep':
        """Shallow-merge ``updates`` into this step, keeping its id."""
        payload = dict(self.payload)
        payload.update({k: v for k, v in updates.items() if k not in RESERVED_STEP_KEYS})
        return TestStep(
            id=self.id,
            timestamp=updates.get("timestamp", self.timestamp),
            payload=payload
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.payload)
        data["id"] = self.id
        data["timestamp"] = self.timestamp
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TestStep':
        """Create a step from its flattened dictionary form."""
        payload = {k: v for k, v in data.items() if k not in RESERVED_STEP_KEYS}
        return cls(id=data["id"], timestamp=data["timestamp"], payload=payload)


_STRATEGY_VALUES = {s.value for s in HealingStrategy}


def _coerce_strategies(value: Any) -> Any:
    """Turn known strategy names into members; anything else is kept as given."""
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
        return value
    return tuple(
        HealingStrategy(s) if isinstance(s, str) and s in _STRATEGY_VALUES else s
        for s in value
    )


def _strategy_value(strategy: Any) -> Any:
    return strategy.value if isinstance(strategy, HealingStrategy) else strategy


def _default_strategies() -> Tuple[HealingStrategy, ...]:
    return (
        HealingStrategy.ATTRIBUTE_MATCHING,
        HealingStrategy.TEXT_CONTENT_MATCHING,
        HealingStrategy.POSITIONAL_MATCHING
    )


@dataclass(frozen=True)
class HealingConfig:
    """Settings handed to the healing engine when generated tests are replayed."""
    enabled_strategies: Tuple[HealingStrategy, ...] = field(default_factory=_default_strategies)
    confidence_threshold: float = 0.8
    max_retry_attempts: int = 3
    fallback_timeout: int = 5000  # milliseconds

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def merged(self, partial: Mapping[str, Any]) -> 'HealingConfig':
        """Shallow-merge ``partial`` over this config.

        Values are taken as given. Known strategy names in a list are
        turned into ``HealingStrategy`` members; unknown names and
        non-list values are stored unchanged. Keys that are not config
        fields are dropped.
        """
        known = {k: v for k, v in partial.items() if k in self.field_names()}
        if "enabled_strategies" in known:
            known["enabled_strategies"] = _coerce_strategies(known["enabled_strategies"])
        return replace(self, **known)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        strategies = self.enabled_strategies
        if isinstance(strategies, tuple):
            strategies = [_strategy_value(s) for s in strategies]
        return {
            "enabled_strategies": strategies,
            "confidence_threshold": self.confidence_threshold,
            "max_retry_attempts": self.max_retry_attempts,
            "fallback_timeout": self.fallback_timeout
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HealingConfig':
        """Create configuration from dictionary."""
        return cls().merged(data)


@dataclass(frozen=True)
class RecordingState:
    """Root aggregate: lifecycle flags, test draft, step ledger and healing config."""
    is_recording: bool = False
    is_paused: bool = False
    current_test: Optional[GeneratedTest] = None
    steps: Tuple[TestStep, ...] = ()
    healing_config: HealingConfig = field(default_factory=HealingConfig)

    @property
    def status(self) -> SessionStatus:
        if self.is_recording:
            return SessionStatus.PAUSED if self.is_paused else SessionStatus.RECORDING
        if self.current_test is None:
            return SessionStatus.IDLE
        return SessionStatus.STOPPED

    @property
    def step_ids(self) -> List[str]:
        return [step.id for step in self.steps]

    def find_step(self, step_id: str) -> Optional[TestStep]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary for code generation and export."""
        return {
            "is_recording": self.is_recording,
            "is_paused": self.is_paused,
            "status": self.status.value,
            "current_test": self.current_test.to_dict() if self.current_test else None,
            "steps": [step.to_dict() for step in self.steps],
            "healing_config": self.healing_config.to_dict()
        }
