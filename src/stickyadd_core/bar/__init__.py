"""Sticky bar configuration, preview, onboarding and admin actions."""
from .config import DEFAULT_CONFIG, PRESETS, UnknownPresetError, merge_with_defaults
from .onboarding import OnboardingState, TOTAL_STEPS
from .preview import BarPreview, build_preview
from .service import StickyBarAdminService

__all__ = [
    "DEFAULT_CONFIG",
    "PRESETS",
    "TOTAL_STEPS",
    "BarPreview",
    "OnboardingState",
    "StickyBarAdminService",
    "UnknownPresetError",
    "build_preview",
    "merge_with_defaults",
]
