# tests/test_vector.py
import os
from io import BytesIO

import pytest
from PIL import Image

import config
from rankcard import vector
from rankcard.assets import AssetRegistry, Toy
from rankcard.errors import BufferAllocationError, VectorError
from rankcard.vector import inline_images, intrinsic_size, parse, rasterize, resolve_href
from utility.image_utils import encode_png, split_data_uri, to_data_uri

SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink"'
    ' width="100" height="50">{}</svg>'
)
RED = (255, 0, 0, 255)


@pytest.fixture(scope="module")
def assets():
    return AssetRegistry.default()


def draw(body, assets):
    return rasterize(SVG.format(body), assets)


def test_fontconfig_points_at_card_fonts():
    assert os.environ["FONTCONFIG_FILE"] == str(config.FONTCONFIG_FILE)
    assert config.FONTCONFIG_FILE.exists()


def test_canvas_starts_transparent(assets):
    img = draw("", assets)
    assert img.size == (100, 50)
    assert img.mode == "RGBA"
    assert img.getpixel((50, 25)) == (0, 0, 0, 0)


def test_paths_and_ellipses_are_drawn(assets):
    img = draw(
        '<path d="M0 0 H20 V20 H0 Z" fill="#ff0000"/>'
        '<ellipse cx="70" cy="25" rx="20" ry="10" fill="#0000ff"/>',
        assets,
    )
    assert img.getpixel((5, 5)) == RED
    assert img.getpixel((70, 25)) == (0, 0, 255, 255)
    assert img.getpixel((70, 5))[3] == 0


def test_group_transforms(assets):
    img = draw(
        '<g transform="translate(50 0) scale(2)"><rect width="10" height="10" fill="red"/></g>',
        assets,
    )
    assert img.getpixel((65, 15)) == RED
    assert img.getpixel((45, 5))[3] == 0


def test_text_draws_with_card_fonts(assets):
    img = draw(
        '<text x="5" y="40" font-family="Lato" font-size="40" fill="#000">WW</text>', assets
    )
    assert img.getbbox() is not None


def test_size_falls_back_to_viewbox():
    root = parse('<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10.5 20"/>')
    assert intrinsic_size(root) == (11, 20)


@pytest.mark.parametrize(
    "document",
    [
        "<svg",
        "not xml at all",
        '<html xmlns="http://www.w3.org/1999/xhtml" width="1" height="1"/>',
        '<svg xmlns="http://www.w3.org/2000/svg"/>',
        '<svg xmlns="http://www.w3.org/2000/svg" width="50%" height="10"/>',
    ],
)
def test_unusable_documents(document, assets):
    with pytest.raises(VectorError):
        rasterize(document, assets)


@pytest.mark.parametrize("size", [("0", "10"), ("10", "-5")])
def test_empty_canvas_is_a_buffer_error(size, assets):
    doc = f'<svg xmlns="http://www.w3.org/2000/svg" width="{size[0]}" height="{size[1]}"/>'
    with pytest.raises(BufferAllocationError):
        rasterize(doc, assets)


def test_oversized_canvas_is_a_buffer_error(monkeypatch, assets):
    monkeypatch.setattr(config, "MAX_PIXELS", 99)
    with pytest.raises(BufferAllocationError):
        rasterize('<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10"/>', assets)


def test_cairo_memory_failure_is_a_buffer_error(mocker, assets):
    mocker.patch.object(vector.cairosvg, "svg2png", side_effect=MemoryError)
    with pytest.raises(BufferAllocationError):
        draw("", assets)


def test_cairo_value_errors_are_vector_errors(mocker, assets):
    mocker.patch.object(vector.cairosvg, "svg2png", side_effect=ValueError("bad path"))
    with pytest.raises(VectorError):
        draw("", assets)


def test_toy_names_are_inlined(assets):
    uri = resolve_href("gem.png", assets)
    mime, data = split_data_uri(uri)
    assert mime == "image/png"
    assert data == assets.toy_bytes(Toy.GEM)


def test_inline_jpeg_becomes_png(assets):
    out = BytesIO()
    Image.new("RGB", (8, 8), (0, 128, 0)).save(out, format="JPEG")
    mime, data = split_data_uri(resolve_href(to_data_uri(out.getvalue(), "image/jpeg"), assets))
    assert mime == "image/png"
    assert data.startswith(b"\x89PNG")


@pytest.mark.parametrize(
    "href",
    [
        "rocket.png",
        "https://example.com/a.png",
        "file:///etc/passwd",
        "data:image/gif;base64,R0lGODlhAQABAAAAACw=",
        "data:image/png;base64,bm90IGEgcG5n",
        "data:image/png,plain",
    ],
)
def test_unresolved_images_are_removed(href, assets):
    root = parse(SVG.format(f'<g><image width="10" height="10" href="{href}"/></g>'))
    assert inline_images(root, assets) == 1
    assert not [e for e in root.iter() if e.tag.endswith("image")]


def test_resolved_images_keep_their_attribute(assets, avatar_uri):
    root = parse(
        SVG.format(
            f'<image width="10" height="10" xlink:href="{avatar_uri}"/>'
            '<image width="10" height="10" href="bug.png"/>'
        )
    )
    assert inline_images(root, assets) == 0
    first, second = [e for e in root.iter() if e.tag.endswith("image")]
    assert first.get(vector.XLINK_HREF).startswith("data:image/png;base64,")
    assert second.get("href").startswith("data:image/png;base64,")


def test_toy_sprite_is_drawn(assets):
    img = draw('<image x="0" y="0" width="32" height="32" href="gem.png"/>', assets)
    assert img.getbbox() is not None
    assert img.getpixel((80, 40))[3] == 0


def test_avatar_is_clipped(assets, avatar_uri, avatar_rgba):
    img = draw(
        '<defs><clipPath id="c"><circle cx="25" cy="25" r="20"/></clipPath></defs>'
        f'<image x="0" y="0" width="50" height="50" xlink:href="{avatar_uri}" clip-path="url(#c)"/>',
        assets,
    )
    assert img.getpixel((25, 25)) == avatar_rgba
    assert img.getpixel((2, 2))[3] == 0


def test_image_inherits_group_opacity(assets):
    solid = to_data_uri(encode_png(Image.new("RGBA", (4, 4), RED)), "image/png")
    img = draw(
        f'<g opacity="0.5"><image x="0" y="0" width="20" height="20" href="{solid}"/></g>',
        assets,
    )
    alpha = img.getpixel((10, 10))[3]
    assert 120 <= alpha <= 135
