"""Sticky bar configuration: defaults, presets and merge helpers.

The config lives as a JSON object in the ``stickyadd.config`` shop metafield.
Stored configs are partial; readers always merge them over DEFAULT_CONFIG.
"""
import copy
import json
import logging
from typing import Any, Optional


logger = logging.getLogger(__name__)


CONFIG_SECTIONS = (
    "settings",
    "product",
    "controls",
    "button",
    "announcement",
    "display",
)

DEFAULT_CONFIG: dict = {
    "enabled": True,
    "settings": {
        "position": "bottom",
        "openTrigger": "standard",
        "layout": "docked",
    },
    "product": {
        "showImage": True,
        "showTitle": True,
        "showPrice": True,
        "showCompareAtPrice": True,
    },
    "controls": {
        "showVariantSelector": True,
        "showQuantitySelector": True,
    },
    "button": {
        "text": "Add to cart",
        "color": "#005bd3",
        "textColor": "#ffffff",
    },
    "announcement": {
        "enabled": True,
        "text": "Get it while it lasts 🔥",
        "color": "#ff6d00",
        "backgroundColor": "#ccfbf1",
    },
    "display": {
        "backgroundColor": "#202223",
        "textColor": "#ffffff",
        "glassy": False,
        "rounded": "rounded",
    },
}

# Fallbacks used by the onboarding wizard when a stored section is absent.
# They differ from DEFAULT_CONFIG (light bar, announcement off).
WIZARD_DEFAULTS: dict = {
    "settings": {"position": "bottom", "layout": "docked"},
    "product": {"showImage": True, "showTitle": True, "showPrice": True},
    "controls": {"showVariantSelector": True, "showQuantitySelector": True},
    "display": {
        "backgroundColor": "#ffffff",
        "textColor": "#202223",
        "rounded": "rounded",
        "glassy": False,
    },
    "button": {"color": "#005bd3", "textColor": "#ffffff", "text": "Add to cart"},
    "announcement": {"enabled": False, "text": "", "color": "", "backgroundColor": ""},
}

PRESETS: list[dict] = [
    {
        "id": "clean",
        "title": "Clean & Simple",
        "description": "Professional and trustworthy.",
        "config": {
            "display": {
                "backgroundColor": "#ffffff",
                "textColor": "#202223",
                "rounded": "rounded",
                "glassy": False,
            },
            "button": {"color": "#005bd3", "textColor": "#ffffff"},
            "settings": {"layout": "docked", "position": "bottom"},
        },
    },
    {
        "id": "bold",
        "title": "Bold Dark",
        "description": "High contrast for maximum visibility.",
        "config": {
            "display": {
                "backgroundColor": "#202223",
                "textColor": "#ffffff",
                "rounded": "none",
                "glassy": False,
            },
            "button": {"color": "#ffffff", "textColor": "#202223"},
            "settings": {"layout": "docked", "position": "bottom"},
        },
    },
    {
        "id": "glassy",
        "title": "Modern Glass",
        "description": "Trendy frosted glass effect.",
        "config": {
            "display": {
                "backgroundColor": "#202223",
                "textColor": "#ffffff",
                "rounded": "pill",
                "glassy": True,
            },
            "button": {"color": "#005bd3", "textColor": "#ffffff"},
            "settings": {"layout": "floating", "position": "bottom"},
        },
    },
    {
        "id": "minimal",
        "title": "Minimalist",
        "description": "Less is more. Focus on the button.",
        "config": {
            "display": {
                "backgroundColor": "#f1f2f4",
                "textColor": "#202223",
                "rounded": "rounded",
                "glassy": False,
            },
            "button": {"color": "#202223", "textColor": "#ffffff"},
            "product": {"showImage": False, "showTitle": True, "showPrice": False},
            "settings": {"layout": "floating", "position": "top"},
        },
    },
]


class UnknownPresetError(KeyError):
    """Raised when a preset id is not in PRESETS."""

    def __init__(self, preset_id: str):
        self.preset_id = preset_id
        super().__init__(f"Unknown preset: {preset_id}")


def parse_metafield_value(value: Optional[str]) -> Optional[dict]:
    """Parse a JSON metafield value into a dict.

    Args:
        value: Raw metafield value (may be None or empty)

    Returns:
        Parsed object, or None when missing, malformed or not an object
    """
    if not value:
        return None

    try:
        parsed = json.loads(value)
    except (TypeError, ValueError) as exc:
        logger.warning("Ignoring malformed metafield JSON: %s", exc)
        return None

    if not isinstance(parsed, dict):
        logger.warning("Ignoring non-object metafield JSON (%s)", type(parsed).__name__)
        return None

    return parsed


def merge_with_defaults(stored: Optional[dict]) -> dict:
    """Overlay a stored (partial) config on DEFAULT_CONFIG.

    Top-level keys are overlaid first, then every known section is merged
    one level deep so partial sections keep their default fields.

    Args:
        stored: Parsed stored config or None

    Returns:
        Complete config (never shares objects with DEFAULT_CONFIG)
    """
    stored = stored or {}
    merged = copy.deepcopy(DEFAULT_CONFIG)
    merged.update(copy.deepcopy(stored))

    for section in CONFIG_SECTIONS:
        stored_section = stored.get(section)
        if not isinstance(stored_section, dict):
            stored_section = {}
        merged[section] = {
            **copy.deepcopy(DEFAULT_CONFIG[section]),
            **copy.deepcopy(stored_section),
        }

    return merged


def deep_merge(target: Optional[dict], source: Optional[dict]) -> dict:
    """Recursively merge ``source`` into a copy of ``target``.

    Nested dicts merge key by key; any other value in ``source`` replaces
    the target value. Keys only present in ``target`` are kept.
    """
    result = copy.deepcopy(target) if isinstance(target, dict) else {}

    for key, value in (source or {}).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result


def set_path(config: dict, path: str, value: Any) -> dict:
    """Return a copy of ``config`` with the dotted ``path`` set to ``value``.

    Missing (or non-object) intermediate keys are replaced by empty objects.
    """
    keys = path.split(".")
    if not path or any(not key for key in keys):
        raise ValueError(f"Invalid config path: {path!r}")

    result = copy.deepcopy(config)
    current = result
    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value

    return result


def get_preset(preset_id: str) -> dict:
    for preset in PRESETS:
        if preset["id"] == preset_id:
            return preset
    raise UnknownPresetError(preset_id)


def apply_preset(config: dict, preset_id: str) -> dict:
    """Merge a preset's sections over the matching sections of ``config``."""
    preset_config = get_preset(preset_id)["config"]

    result = copy.deepcopy(config)
    for section, values in preset_config.items():
        current = result.get(section)
        if not isinstance(current, dict):
            current = {}
        result[section] = {**current, **copy.deepcopy(values)}

    return result


def matches_preset(config: dict, preset_id: str) -> bool:
    """True when ``config`` already carries the preset's look."""
    preset_config = get_preset(preset_id)["config"]

    display = config.get("display") or {}
    for key, value in preset_config["display"].items():
        if display.get(key) != value:
            return False

    button = config.get("button") or {}
    return button.get("color") == preset_config["button"]["color"]


def wizard_config(stored: Optional[dict]) -> dict:
    """Initial option set for the onboarding wizard.

    Each section is taken whole from the stored config when present,
    otherwise from WIZARD_DEFAULTS.
    """
    stored = stored or {}
    return {
        section: copy.deepcopy(stored.get(section) or WIZARD_DEFAULTS[section])
        for section in WIZARD_DEFAULTS
    }
