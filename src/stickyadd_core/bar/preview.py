"""Live preview model for the sticky bar.

The storefront bar is styled through CSS custom properties; the admin
preview binds the same variables from the config so both render alike.
"""
from typing import Optional

from pydantic import BaseModel, Field


FALLBACK_PRODUCT_TITLE = "Classic T-Shirt"
FALLBACK_PRICE = "29.00"
DEFAULT_VARIANT_TITLE = "Default Title"
SINGLE_VARIANT_LABEL = "One Size"

RADIUS_BY_STYLE = {"pill": "999px", "rounded": "12px"}


class PreviewAnnouncement(BaseModel):
    text: str = ""
    color: str = ""
    background_color: str = ""


class BarPreview(BaseModel):
    """Everything the preview pane needs to draw the bar."""

    css_variables: dict[str, str]
    style: str = Field(..., description="css_variables as an inline style attribute")
    position: str = Field(..., description="CSS class: 'bottom' or 'top'")
    announcement: Optional[PreviewAnnouncement] = None
    show_image: bool
    show_title: bool
    show_price: bool
    show_variant_selector: bool
    show_quantity_selector: bool
    button_text: str
    product_title: str
    product_price: str
    product_image_url: Optional[str] = None
    variant_label: Optional[str] = None
    mock_url: str


def build_preview_variables(config: dict) -> dict[str, str]:
    """Map a (merged) config onto the bar's CSS custom properties."""
    display = config.get("display") or {}
    button = config.get("button") or {}
    settings = config.get("settings") or {}

    floating = settings.get("layout") == "floating"

    return {
        "--sb-bg": display.get("backgroundColor", ""),
        "--sb-text": display.get("textColor", ""),
        "--sb-btn-bg": button.get("color", ""),
        "--sb-btn-text": button.get("textColor", ""),
        "--sb-radius": RADIUS_BY_STYLE.get(display.get("rounded"), "0px"),
        "--sb-blur": "10px" if display.get("glassy") else "0px",
        "--sb-layout-margin": "20px" if floating else "0px",
        "--sb-layout-width": "calc(100% - 40px)" if floating else "100%",
        "--sb-layout-radius": "16px" if floating else "0px",
    }


def style_attribute(variables: dict[str, str]) -> str:
    """Render CSS variables as an inline style attribute value."""
    return "; ".join(f"{name}: {value}" for name, value in variables.items())


def _first_variant(product: Optional[dict]) -> Optional[dict]:
    if not product:
        return None
    edges = (product.get("variants") or {}).get("edges") or []
    if not edges:
        return None
    return edges[0].get("node")


def variant_label(product: Optional[dict]) -> Optional[str]:
    """Label of the variant selector for the preview product.

    Single-variant products report "Default Title", shown as "One Size".
    """
    variant = _first_variant(product)
    title = variant.get("title") if variant else None
    if title == DEFAULT_VARIANT_TITLE:
        return SINGLE_VARIANT_LABEL
    return title


def build_preview(
    config: dict,
    product: Optional[dict] = None,
    shop: Optional[str] = None,
) -> BarPreview:
    """Build the preview model for ``config`` and an optional preview product.

    Args:
        config: Merged config (see merge_with_defaults)
        product: Product node (title, handle, featuredImage, variants)
        shop: Shop domain used in the mock browser URL

    Returns:
        BarPreview
    """
    product_section = config.get("product") or {}
    controls = config.get("controls") or {}
    button = config.get("button") or {}
    announcement = config.get("announcement") or {}
    settings = config.get("settings") or {}

    variant = _first_variant(product)
    image = (product or {}).get("featuredImage") or {}
    handle = (product or {}).get("handle") or "example-product"

    variables = build_preview_variables(config)

    return BarPreview(
        css_variables=variables,
        style=style_attribute(variables),
        position=settings.get("position", "bottom"),
        announcement=(
            PreviewAnnouncement(
                text=announcement.get("text", ""),
                color=announcement.get("color", ""),
                background_color=announcement.get("backgroundColor", ""),
            )
            if announcement.get("enabled")
            else None
        ),
        show_image=bool(product_section.get("showImage")),
        show_title=bool(product_section.get("showTitle")),
        show_price=bool(product_section.get("showPrice")),
        show_variant_selector=bool(controls.get("showVariantSelector")),
        show_quantity_selector=bool(controls.get("showQuantitySelector")),
        button_text=button.get("text", ""),
        product_title=(product or {}).get("title") or FALLBACK_PRODUCT_TITLE,
        product_price=str((variant or {}).get("price") or FALLBACK_PRICE),
        product_image_url=image.get("url"),
        variant_label=variant_label(product),
        mock_url=f"{shop or 'yourstore.com'}/products/{handle}",
    )
