import base64

import pytest

from report import datauri


class TestNormalizeImageMime:
    def test_keeps_image_types(self) -> None:
        assert datauri.normalize_image_mime("image/png") == "image/png"

    @pytest.mark.parametrize("mime", [None, "", "application/octet-stream", "text/plain"])
    def test_falls_back_to_jpeg(self, mime) -> None:
        assert datauri.normalize_image_mime(mime) == "image/jpeg"


class TestDecodeImage:
    def test_strips_data_uri_prefix(self) -> None:
        payload = b"\x89PNG fake bytes"
        uri = "data:image/png;base64," + base64.b64encode(payload).decode()

        assert datauri.decode_image(uri) == payload

    def test_accepts_subtypes_with_symbols(self) -> None:
        uri = "data:image/svg+xml;base64," + base64.b64encode(b"<svg/>").decode()

        assert datauri.decode_image(uri) == b"<svg/>"

    def test_accepts_bare_base64(self) -> None:
        assert datauri.decode_image(base64.b64encode(b"raw").decode()) == b"raw"

    def test_rejects_invalid_payload(self) -> None:
        with pytest.raises(ValueError, match="Invalid base64"):
            datauri.decode_image("data:image/png;base64,not*base64!")
