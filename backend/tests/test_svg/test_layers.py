"""Tests for design-layer classification and background compositing."""

from __future__ import annotations

import logging

from designsync.svg.compositor import compose_background, layer_element
from designsync.svg.layers import DesignLayer, LayerType, classify_layers, read_layers
from designsync.svg.markup import iter_elements, parse_markup
from tests.conftest import CARD_MARKUP, NO_BACKGROUND_MARKUP

SVG_OPEN = '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink">'


def test_read_layers_all_images():
    layers = read_layers(parse_markup(CARD_MARKUP))
    assert [layer.type for layer in layers] == [
        LayerType.BACKGROUND,
        LayerType.CLIPART,
        LayerType.CLIPART,
        LayerType.PHOTO,
    ]
    logo = layers[1]
    assert (logo.x, logo.y, logo.width, logo.height, logo.angle) == (40, 30, 120, 80, 15)
    assert logo.center == (100, 70)


def test_unknown_type_is_untyped():
    assert LayerType.parse("DgSomethingElse") is LayerType.UNTYPED
    assert LayerType.parse("") is LayerType.UNTYPED
    assert LayerType.parse("DgClipart") is LayerType.CLIPART


def test_is_logo():
    assert DesignLayer(LayerType.CLIPART, href="Clipart/Logos/brand.png").is_logo
    assert not DesignLayer(LayerType.CLIPART, href="Clipart/star.png").is_logo
    assert not DesignLayer(LayerType.CLIPART, href="Images/Logos/brand.png").is_logo
    assert not DesignLayer(LayerType.BACKGROUND, href="Clipart/Logos/bg.png").is_logo


def test_plain_href_fallback():
    markup = SVG_OPEN + '<image Dg_type="DgClipart" href="Clipart/star.png"/></svg>'
    (layer,) = read_layers(parse_markup(markup))
    assert layer.href == "Clipart/star.png"


def test_classify_resolves_assets(extracted_bundle):
    result = classify_layers(CARD_MARKUP, extracted_bundle)

    assert (result.canvas_width, result.canvas_height) == (1050, 600)
    assert result.has_canvas
    assert [layer.type for layer in result.layers] == [
        LayerType.BACKGROUND,
        LayerType.CLIPART,
        LayerType.CLIPART,
    ]
    assert [layer.asset.name for layer in result.layers] == ["bg.jpg", "brand.png", "star.png"]
    assert result.unresolved == ()


def test_classify_skips_missing_assets(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        result = classify_layers(CARD_MARKUP, tmp_path)

    assert result.layers == ()
    assert len(result.unresolved) == 3
    assert result.has_canvas
    assert "not found" in caplog.text


def test_classify_without_background(extracted_bundle):
    result = classify_layers(NO_BACKGROUND_MARKUP, extracted_bundle)
    assert not result.has_canvas
    assert len(result.layers) == 1


def test_last_background_defines_canvas(tmp_path):
    markup = (
        SVG_OPEN
        + '<image Dg_type="DgBackGround" width="100" height="50" xlink:href="data:image/png;base64,AAAA"/>'
        + '<image Dg_type="DgBackGround" width="300" height="200" xlink:href="data:image/png;base64,BBBB"/>'
        + "</svg>"
    )
    result = classify_layers(markup, tmp_path)
    assert (result.canvas_width, result.canvas_height) == (300, 200)
    assert all(layer.is_embedded for layer in result.layers)


def test_layer_element_rotates_about_center(extracted_bundle):
    result = classify_layers(CARD_MARKUP, extracted_bundle)
    elem = layer_element(result.layers[1])

    assert elem["tag"] == "image"
    assert elem["href"].startswith("data:image/jpeg;base64,")
    assert elem["transform"] == "rotate(15, 100, 70)"
    assert (elem["x"], elem["y"], elem["width"], elem["height"]) == (40, 30, 120, 80)


def test_embedded_href_passed_through():
    layer = DesignLayer(LayerType.CLIPART, 10, 10, 20, 20, 0, "data:image/png;base64,AAAA")
    assert layer_element(layer)["href"] == "data:image/png;base64,AAAA"


def test_compose_background(extracted_bundle):
    composed = compose_background(classify_layers(CARD_MARKUP, extracted_bundle))
    root = parse_markup(composed)

    assert root.get("width") == "1050"
    assert root.get("height") == "600"
    images = list(iter_elements(root, "image"))
    assert len(images) == 3
    assert all(img.get("href").startswith("data:") for img in images)
    assert images[0].get("transform") == "rotate(0, 525, 300)"
    assert "Photos/face" not in composed
    assert "<text" not in composed
