"""Tests for final-document assembly."""

from __future__ import annotations

from designsync.svg.assembler import (
    BACKGROUND_HREF,
    LOGO_HREF,
    PROFILE_HREF,
    assemble_final,
    locate_layout,
)
from designsync.svg.markup import SVG_NS, iter_elements, local_name, parse_markup
from designsync.svg.text_roles import substitute_text
from tests.conftest import CARD_MARKUP

SVG_OPEN = '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" width="400" height="300">'


def _images(root):
    return {img.get("href"): img for img in iter_elements(root, "image")}


def test_locate_layout():
    layout = locate_layout(substitute_text(CARD_MARKUP))

    assert (layout.canvas_width, layout.canvas_height) == ("1050", "600")
    assert layout.logo.href == "Clipart/Logos/brand.dgpng"
    assert layout.profile.center == (900, 200)
    assert len(layout.texts) == 6
    assert all(t.startswith("<text") for t in layout.texts)
    assert not any("xmlns" in t for t in layout.texts)


def test_final_document_layers():
    final = assemble_final(substitute_text(CARD_MARKUP))
    root = parse_markup(final)

    assert final.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert (root.get("width"), root.get("height")) == ("1050", "600")
    order = [local_name(el) for el in root]
    assert order == ["image", "image", "defs", "image"] + ["text"] * 6

    images = _images(root)
    background = images[BACKGROUND_HREF]
    assert (background.get("x"), background.get("y")) == ("0", "0")
    assert (background.get("width"), background.get("height")) == ("1050", "600")

    logo = images[LOGO_HREF]
    assert [logo.get(k) for k in ("x", "y", "width", "height")] == ["40", "30", "120", "80"]

    profile = images[PROFILE_HREF]
    assert profile.get("mask") == "url(#profileMask)"
    assert [profile.get(k) for k in ("x", "y", "width", "height")] == ["800", "100", "200", "200"]


def test_profile_mask_circle():
    root = parse_markup(assemble_final(substitute_text(CARD_MARKUP)))

    (mask,) = iter_elements(root, "mask")
    assert mask.get("id") == "profileMask"
    (circle,) = mask
    assert [circle.get(k) for k in ("cx", "cy", "r")] == ["900", "200", "100"]
    assert circle.get("fill") == "white"


def test_texts_inherit_svg_namespace():
    root = parse_markup(assemble_final(substitute_text(CARD_MARKUP)))

    texts = list(root.iter(f"{{{SVG_NS}}}text"))
    assert len(texts) == 6
    assert texts[0].get("id") == "selfName"
    assert texts[0][0].tag == f"{{{SVG_NS}}}tspan"


def test_missing_logo_and_profile_zero_filled():
    final = assemble_final(SVG_OPEN + "</svg>")
    root = parse_markup(final)
    images = _images(root)

    assert [images[LOGO_HREF].get(k) for k in ("x", "y", "width", "height")] == ["0"] * 4
    assert [images[PROFILE_HREF].get(k) for k in ("width", "height")] == ["0", "0"]
    (circle,) = iter_elements(root, "circle")
    assert circle.get("r") == "0"


def test_last_candidates_win():
    markup = (
        SVG_OPEN
        + '<image Dg_type="DgPhoto" x="0" y="0" width="50" height="50" xlink:href="a.png"/>'
        + '<image Dg_type="DgPhoto" x="100" y="100" width="80" height="60" xlink:href="b.png"/>'
        + '<image Dg_type="DgClipart" x="1" y="1" width="5" height="5" xlink:href="Clipart/Logos/a.png"/>'
        + '<image Dg_type="DgClipart" x="2" y="2" width="6" height="6" xlink:href="Clipart/Logos/b.png"/>'
        + "</svg>"
    )
    layout = locate_layout(markup)
    assert layout.profile.href == "b.png"
    assert layout.logo.href == "Clipart/Logos/b.png"

    root = parse_markup(assemble_final(markup))
    (circle,) = iter_elements(root, "circle")
    # Centre of the photo box; radius from its width
    assert [circle.get(k) for k in ("cx", "cy", "r")] == ["140", "130", "40"]
