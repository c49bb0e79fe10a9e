"""Theme app-embed detection from the main theme's settings_data.json."""
import json
import logging
from typing import Optional


logger = logging.getLogger(__name__)


STICKY_BAR_BLOCK_MARKER = "/blocks/sticky_bar/"


def is_embed_active(settings_data: Optional[str]) -> bool:
    """Check whether the sticky bar app embed is enabled in the theme.

    Args:
        settings_data: Raw content of config/settings_data.json

    Returns:
        True if an enabled block of the sticky bar type exists in current.blocks
    """
    if not settings_data:
        return False

    try:
        settings = json.loads(settings_data)
    except ValueError as exc:
        logger.error("Error parsing settings_data.json: %s", exc)
        return False

    if not isinstance(settings, dict):
        return False

    # "current" is a preset name string when the theme uses a stock preset
    current = settings.get("current")
    if not isinstance(current, dict):
        return False

    blocks = current.get("blocks") or {}
    if not isinstance(blocks, dict):
        return False

    for block in blocks.values():
        if not isinstance(block, dict):
            continue
        block_type = block.get("type") or ""
        if STICKY_BAR_BLOCK_MARKER in block_type and block.get("disabled") is not True:
            return True

    return False


def theme_editor_url(shop: str) -> str:
    """Deep link into the theme editor's app embeds panel."""
    return f"https://{shop}/admin/themes/current/editor?context=apps"
