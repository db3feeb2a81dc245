"""Wizard — eventos, passos, validadores, desfechos e política de rewind.

Exporta:
- InputEvent (ActionEvent | TextEvent | InterruptEvent)
- Step, Flow, RewindRule
- SceneState + validate_transition
- ErrorRecovery e RecoveryAction
"""

from vybebot.domain.wizard.events import (
    ActionEvent,
    EventKind,
    InputEvent,
    InterruptEvent,
    TextEvent,
)
from vybebot.domain.wizard.recovery import (
    ErrorRecovery,
    LeaveFatal,
    LeaveWithRetryAffordance,
    RecoveryAction,
    RewindTo,
)
from vybebot.domain.wizard.scene_states import (
    ACTIVE_SCENE_STATES,
    TERMINAL_SCENE_STATES,
    SceneState,
    validate_transition,
)
from vybebot.domain.wizard.steps import Flow, RewindRule, Step

__all__ = [
    "ActionEvent",
    "EventKind",
    "InputEvent",
    "InterruptEvent",
    "TextEvent",
    "ErrorRecovery",
    "LeaveFatal",
    "LeaveWithRetryAffordance",
    "RecoveryAction",
    "RewindTo",
    "ACTIVE_SCENE_STATES",
    "TERMINAL_SCENE_STATES",
    "SceneState",
    "validate_transition",
    "Flow",
    "RewindRule",
    "Step",
]
