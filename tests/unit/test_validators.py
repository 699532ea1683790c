import pytest

from src.utils.validators import (
    MAX_PAGE,
    MAX_POSITION,
    ImageValidationError,
    coerce_status,
    parse_flag,
    parse_index,
    parse_page,
    validate_image,
)


@pytest.mark.parametrize("raw, expected", [
    (None, 0),
    ("", 0),
    ("3", 3),
    ("3abc", 3),
    (" 7", 7),
    ("99999999999999999999", MAX_POSITION),
    ("-2", 0),
    ("abc", 0),
])
def test_parse_index(raw, expected):
    assert parse_index(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    (None, 1),
    ("0", 1),
    ("-1", 1),
    ("2", 2),
    ("4pages", 4),
    ("999999999999999999999", MAX_PAGE),
    ("x", 1),
])
def test_parse_page(raw, expected):
    assert parse_page(raw) == expected


def test_parse_flag_only_accepts_lowercase_true():
    assert parse_flag("true")
    assert not parse_flag("True")
    assert not parse_flag("1")
    assert not parse_flag(None)


def test_coerce_status():
    assert coerce_status(None) is False
    assert coerce_status(True) is True
    assert coerce_status("true") is True
    assert coerce_status(False) is False
    assert coerce_status("false") is False
    assert coerce_status("yes") is False


def test_validate_image_defaults_to_jpeg():
    contents, mime_type = validate_image(b"\xff\xd8\xff", None, 1024)

    assert contents == b"\xff\xd8\xff"
    assert mime_type == "image/jpeg"


def test_validate_image_strips_parameters():
    _, mime_type = validate_image(b"png", "image/PNG; charset=binary", 1024)
    assert mime_type == "image/png"


def test_validate_image_rejects_empty():
    with pytest.raises(ImageValidationError, match="No image file provided"):
        validate_image(b"", "image/jpeg", 1024)


def test_validate_image_rejects_unsupported_type():
    with pytest.raises(ImageValidationError, match="Unsupported image type"):
        validate_image(b"GIF89a", "image/gif", 1024)


def test_validate_image_rejects_oversized():
    with pytest.raises(ImageValidationError, match="too large"):
        validate_image(b"x" * 2048, "image/jpeg", 1024)


def test_largest_page_offset_fits_in_32_bits():
    assert (MAX_PAGE - 1) * 50 < 2**31
