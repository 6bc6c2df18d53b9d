"""
taiko-engine: incremental rule validation for a two-row matching puzzle.

Players connect top and bottom vertices in pairs; every pair induces an
oriented horizontal edge on each row. The engine checks, pair by pair,
that the board keeps satisfying the rules of the current level:
- orientation: consistent directions, no short directed cycles
- no-fold: each color's edges form a partial injection per row
- no-pattern: no two trios share a signature
- girth: no row cycle shorter than a bound
"""

__version__ = "0.1.0"

# Engine and turn protocol
from .engine import EngineEvent, EngineEventType, PuzzleEngine

# Color grouping
from .grouping import ColorGroup, ColorGroups, MergeResult

# History and persistence
from .history import History, HistorySnapshot

# Level policy
from .levels import (
    LEVELS,
    CheckContext,
    CheckSpec,
    describe_level,
    get_checks_for_level,
    level_order,
    run_level_checks,
    unlocked_levels,
)

# Orientation
from .orientation import (
    OrientationMaps,
    OrientationResolution,
    apply_orientation,
    resolve_orientation,
)

# Colors
from .palette import ColorPalette

# Pattern log
from .pattern_log import DerivedEdges, PatternLog, derive_edges, rebuild

# Scenario replay
from .replay import replay_sequence
from .serialize import snapshot_from_dict, snapshot_to_dict
from .state import BoardState

# Shared types
from .types import (
    ConnectionPair,
    Direction,
    HorizontalEdge,
    Orientation,
    Row,
    Trio,
    Vertex,
    VerticalConnection,
)

# Validation errors
from .validation import (
    InvalidConnectionError,
    InvalidPairError,
    InvalidVertexError,
    RuleWarning,
    ScenarioError,
    UnknownLevelError,
    ValidationError,
)

# Rule outcomes
from .violations import (
    FoldViolation,
    GirthViolation,
    OrientationViolation,
    PatternViolation,
    RuleCode,
    TurnResult,
)

__all__ = [
    "__version__",
    # Engine
    "PuzzleEngine",
    "EngineEvent",
    "EngineEventType",
    # Types
    "Row",
    "Vertex",
    "Orientation",
    "Direction",
    "VerticalConnection",
    "ConnectionPair",
    "HorizontalEdge",
    "Trio",
    # Components
    "BoardState",
    "ColorGroup",
    "ColorGroups",
    "MergeResult",
    "ColorPalette",
    "OrientationMaps",
    "OrientationResolution",
    "resolve_orientation",
    "apply_orientation",
    "PatternLog",
    "DerivedEdges",
    "derive_edges",
    "rebuild",
    "History",
    "HistorySnapshot",
    "snapshot_to_dict",
    "snapshot_from_dict",
    # Levels
    "LEVELS",
    "CheckContext",
    "CheckSpec",
    "get_checks_for_level",
    "run_level_checks",
    "level_order",
    "unlocked_levels",
    "describe_level",
    # Outcomes
    "RuleCode",
    "TurnResult",
    "OrientationViolation",
    "FoldViolation",
    "PatternViolation",
    "GirthViolation",
    # Errors
    "ValidationError",
    "InvalidVertexError",
    "InvalidConnectionError",
    "InvalidPairError",
    "UnknownLevelError",
    "ScenarioError",
    "RuleWarning",
    # Replay
    "replay_sequence",
]
