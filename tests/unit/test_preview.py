"""Unit tests for the customizer preview (CSS variable binding)."""
from src.stickyadd_core.bar.config import apply_preset, merge_with_defaults
from src.stickyadd_core.bar.preview import (
    FALLBACK_PRICE,
    FALLBACK_PRODUCT_TITLE,
    build_preview,
    build_preview_variables,
    style_attribute,
    variant_label,
)


def _product(variant_title="Small", price="19.99"):
    return {
        "id": "gid://shopify/Product/1",
        "title": "Linen Shirt",
        "handle": "linen-shirt",
        "featuredImage": {"url": "https://cdn.shopify.com/linen.jpg"},
        "variants": {
            "edges": [
                {"node": {"id": "gid://shopify/ProductVariant/1", "title": variant_title, "price": price}}
            ]
        },
    }


def test_variables_for_default_config():
    variables = build_preview_variables(merge_with_defaults(None))

    assert variables == {
        "--sb-bg": "#202223",
        "--sb-text": "#ffffff",
        "--sb-btn-bg": "#005bd3",
        "--sb-btn-text": "#ffffff",
        "--sb-radius": "12px",
        "--sb-blur": "0px",
        "--sb-layout-margin": "0px",
        "--sb-layout-width": "100%",
        "--sb-layout-radius": "0px",
    }


def test_variables_for_floating_glassy_pill():
    config = apply_preset(merge_with_defaults(None), "glassy")

    variables = build_preview_variables(config)

    assert variables["--sb-radius"] == "999px"
    assert variables["--sb-blur"] == "10px"
    assert variables["--sb-layout-margin"] == "20px"
    assert variables["--sb-layout-width"] == "calc(100% - 40px)"
    assert variables["--sb-layout-radius"] == "16px"


def test_square_corners_when_rounded_none():
    config = merge_with_defaults({"display": {"rounded": "none"}})

    assert build_preview_variables(config)["--sb-radius"] == "0px"


def test_style_attribute():
    assert style_attribute({"--sb-bg": "#fff", "--sb-text": "#000"}) == "--sb-bg: #fff; --sb-text: #000"


def test_variant_label_single_variant():
    assert variant_label(_product(variant_title="Default Title")) == "One Size"
    assert variant_label(_product(variant_title="Large")) == "Large"
    assert variant_label(None) is None


def test_build_preview_with_product():
    preview = build_preview(merge_with_defaults(None), _product(), shop="demo.myshopify.com")

    assert preview.product_title == "Linen Shirt"
    assert preview.product_price == "19.99"
    assert preview.product_image_url == "https://cdn.shopify.com/linen.jpg"
    assert preview.mock_url == "demo.myshopify.com/products/linen-shirt"
    assert preview.position == "bottom"
    assert preview.announcement is not None
    assert preview.announcement.background_color == "#ccfbf1"
    assert preview.button_text == "Add to cart"
    assert preview.style.startswith("--sb-bg: #202223; --sb-text: #ffffff")


def test_build_preview_without_product_uses_fallbacks():
    config = merge_with_defaults({"announcement": {"enabled": False}, "settings": {"position": "top"}})

    preview = build_preview(config)

    assert preview.product_title == FALLBACK_PRODUCT_TITLE
    assert preview.product_price == FALLBACK_PRICE
    assert preview.product_image_url is None
    assert preview.announcement is None
    assert preview.position == "top"
    assert preview.mock_url == "yourstore.com/products/example-product"
