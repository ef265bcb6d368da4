import io
import pytest
from PIL import Image
from starlette.datastructures import QueryParams

from app.asset_proxy import transform
from app.asset_proxy.models import TransformRequest
from app.asset_proxy.transform import TranscodingError


def make_png_bytes(size=(10, 10), mode="RGB", color="red"):
    """Generate a simple valid PNG in-memory."""
    img = Image.new(mode, size, color=color)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def open_image(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


# ------------------------------
# parse_transform_params
# ------------------------------

def test_no_params_means_no_transform():
    assert transform.parse_transform_params({}) is None
    assert transform.parse_transform_params({"foo": "bar"}) is None


@pytest.mark.parametrize("value", ["0", "-5", "abc", ""])
def test_non_positive_or_non_numeric_width_is_absent(value):
    assert transform.parse_transform_params({"width": value}) is None


def test_width_only_defaults_quality():
    result = transform.parse_transform_params({"width": "200"})
    assert result == TransformRequest(width=200, height=None, quality=80)


def test_quality_is_capped():
    result = transform.parse_transform_params({"width": "10", "quality": "150"})
    assert result.quality == 100


def test_zero_quality_falls_back_to_default():
    result = transform.parse_transform_params({"height": "10", "quality": "0"})
    assert result == TransformRequest(width=None, height=10, quality=80)


def test_quality_alone_is_a_transform():
    result = transform.parse_transform_params({"quality": "55"})
    assert result == TransformRequest(width=None, height=None, quality=55)
    assert not result.has_dimensions


def test_leading_integer_is_used():
    result = transform.parse_transform_params({"width": " 12px", "height": "7.9"})
    assert result.width == 12
    assert result.height == 7


def test_first_repeated_param_wins():
    result = transform.parse_transform_params(QueryParams("width=30&width=60"))
    assert result.width == 30


# ------------------------------
# transcode_image
# ------------------------------

def test_transcode_never_enlarges():
    data = make_png_bytes(size=(100, 50))
    out = open_image(transform.transcode_image(data, TransformRequest(width=200)))
    assert out.format == "WEBP"
    assert out.size == (100, 50)


def test_transcode_single_dimension_keeps_aspect_ratio():
    data = make_png_bytes(size=(400, 200))
    out = open_image(transform.transcode_image(data, TransformRequest(width=100)))
    assert out.size == (100, 50)

    out = open_image(transform.transcode_image(data, TransformRequest(height=20)))
    assert out.size == (40, 20)


def test_transcode_cover_crops_to_box():
    data = make_png_bytes(size=(400, 200))
    out = open_image(transform.transcode_image(data, TransformRequest(width=100, height=100)))
    assert out.size == (100, 100)


def test_transcode_box_larger_than_source_is_capped_per_axis():
    data = make_png_bytes(size=(100, 50))
    out = open_image(transform.transcode_image(data, TransformRequest(width=300, height=40)))
    assert out.size == (100, 40)


def test_transcode_quality_only_keeps_size():
    data = make_png_bytes(size=(64, 32))
    out = open_image(transform.transcode_image(data, TransformRequest(quality=50)))
    assert out.format == "WEBP"
    assert out.size == (64, 32)


def test_transcode_quality_affects_output():
    noise = Image.effect_noise((128, 128), 64).convert("RGB")
    buf = io.BytesIO()
    noise.save(buf, format="PNG")
    low = transform.transcode_image(buf.getvalue(), TransformRequest(quality=10))
    high = transform.transcode_image(buf.getvalue(), TransformRequest(quality=95))
    assert len(low) < len(high)


def test_transcode_keeps_alpha():
    data = make_png_bytes(size=(20, 20), mode="RGBA", color=(255, 0, 0, 0))
    out = open_image(transform.transcode_image(data, TransformRequest(width=10)))
    assert out.mode == "RGBA"


def test_transcode_palette_image():
    img = Image.new("P", (30, 30))
    buf = io.BytesIO()
    img.save(buf, format="GIF")
    out = open_image(transform.transcode_image(buf.getvalue(), TransformRequest(width=15)))
    assert out.size == (15, 15)


def test_transcode_corrupt_bytes_raises():
    with pytest.raises(TranscodingError):
        transform.transcode_image(b"notanimage", TransformRequest(width=10))
