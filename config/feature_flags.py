"""
LP Sketch - Feature Flags
=========================

Feature flags allow incremental rollouts and easy rollback.
New behaviour is introduced behind a flag and promoted to default after validation.

This file only holds active debug flags and switches for alternative code paths.
"""

from typing import Dict

from loguru import logger

# Feature Flag Registry
# =====================
# The debug flags gate per-candidate tracing in hot paths (snap resolution runs on
# every pointer move, auto-connector analysis on every conductor placement).

FEATURE_FLAGS: Dict[str, bool] = {
    # Debug modes
    "snap_debug": False,  # Logs every accepted snap candidate and the winner
    "input_debug": False,  # Logs angle constraint and target-distance lock decisions
    "auto_connector_debug": False,  # Logs node clusters and branch counts
    "spacing_debug": False,  # Logs anchors and span lengths for auto spacing
    "history_debug": False,  # Logs stack depths on commit/undo/redo

    # Auto connectors
    "incremental_auto_connectors": True,  # Placement only analyses the neighbourhood of new conductors
    "preserve_connector_mode_on_sync": True,  # Full sync keeps mechanical/cadweld family of surviving nodes
}


def is_enabled(flag: str) -> bool:
    """True if ``flag`` is switched on; unknown flags read as off."""
    return bool(FEATURE_FLAGS.get(flag, False))


def set_flag(flag: str, value: bool) -> None:
    """
    Sets a feature flag at runtime (tests, debugging sessions).

    Names outside the registry are accepted and logged as a warning.
    """
    if flag not in FEATURE_FLAGS:
        logger.warning(f"Unknown feature flag '{flag}' set to {value}")
    elif FEATURE_FLAGS[flag] != value:
        logger.debug(f"Feature flag '{flag}': {FEATURE_FLAGS[flag]} -> {value}")
    FEATURE_FLAGS[flag] = bool(value)


def get_all_flags() -> Dict[str, bool]:
    """Snapshot of the registry; mutating it does not change any flag."""
    return dict(FEATURE_FLAGS)
