"""
LP Sketch - Configuration Module
================================

Central configuration for tolerances, feature flags and version information.
"""

from .tolerances import Tolerances, px_to_doc, snap_tolerance_doc, history_max_depth
from .feature_flags import is_enabled, set_flag, get_all_flags, FEATURE_FLAGS
