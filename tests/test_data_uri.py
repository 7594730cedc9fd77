import pytest

from looksim.image.data_uri import decode_base64, ensure_data_uri, is_data_uri, parse_image


def test_parse_data_uri_splits_mime_and_payload():
    inline = parse_image("data:image/png;base64,YWJj")
    assert inline.mime_type == "image/png"
    assert inline.base64_data == "YWJj"
    assert inline.to_bytes() == b"abc"


def test_bare_base64_uses_default_mime():
    inline = parse_image("YWJj", default_mime="image/webp")
    assert inline.mime_type == "image/webp"
    assert inline.to_data_uri() == "data:image/webp;base64,YWJj"


def test_non_base64_data_uri_is_rejected():
    with pytest.raises(ValueError):
        parse_image("data:text/plain,hello")


def test_empty_payload_is_rejected():
    with pytest.raises(ValueError):
        parse_image("")


def test_malformed_base64_is_rejected():
    with pytest.raises(ValueError):
        decode_base64("not base64!!")


def test_ensure_data_uri_prefixes_bare_payload_once():
    assert ensure_data_uri("YWJj") == "data:image/jpeg;base64,YWJj"
    assert ensure_data_uri("data:image/png;base64,YWJj") == "data:image/png;base64,YWJj"
    assert is_data_uri(ensure_data_uri("YWJj"))
