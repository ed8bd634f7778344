import base64

import pytest
from pypdf import PdfReader
from reportlab.platypus import SimpleDocTemplate

from report.renderer import InvalidImageError, ReportRenderError, ReportRenderer, fit_size


def _data_uri(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode()}"


def _page_count(path) -> int:
    return len(PdfReader(str(path)).pages)


@pytest.fixture()
def renderer(local_storage) -> ReportRenderer:
    return ReportRenderer(local_storage)


class TestRender:
    def test_text_only_is_one_page(self, renderer) -> None:
        path = renderer.render("Species: basil.\nHealth: thriving.")

        assert path.exists()
        assert _page_count(path) == 1
        first_page = PdfReader(str(path)).pages[0].extract_text()
        assert "Plant Analysis Report" in first_page
        assert "Date:" in first_page
        assert "basil" in first_page

    def test_image_adds_second_page(self, renderer, png_bytes) -> None:
        path = renderer.render("Short analysis.", _data_uri(png_bytes))

        assert _page_count(path) == 2

    def test_jpeg_data_uri_is_accepted(self, renderer, jpeg_bytes) -> None:
        path = renderer.render("Leaf.", _data_uri(jpeg_bytes, "image/jpeg"))

        assert _page_count(path) == 2

    def test_long_text_paginates_automatically(self, renderer) -> None:
        text = "\n".join(f"Line {i}: water weekly and keep in bright indirect light." for i in range(200))

        path = renderer.render(text)

        assert _page_count(path) > 1

    def test_markup_characters_are_escaped(self, renderer) -> None:
        path = renderer.render("pH < 7 & soil <b>moist</b>")

        assert "pH < 7 & soil <b>moist</b>" in PdfReader(str(path)).pages[0].extract_text()

    def test_temporary_image_removed_after_build(self, renderer, local_storage, png_bytes) -> None:
        path = renderer.render("Text.", _data_uri(png_bytes))

        assert list(local_storage.reports_dir.iterdir()) == [path]


class TestRenderErrors:
    def test_undecodable_image(self, renderer, local_storage) -> None:
        with pytest.raises(InvalidImageError):
            renderer.render("Text.", _data_uri(b"definitely not an image"))

        assert list(local_storage.reports_dir.iterdir()) == []

    def test_invalid_base64(self, renderer, local_storage) -> None:
        with pytest.raises(InvalidImageError):
            renderer.render("Text.", "data:image/png;base64,%%%")

        assert list(local_storage.reports_dir.iterdir()) == []

    def test_build_failure_leaves_no_files(self, renderer, local_storage, png_bytes, monkeypatch) -> None:
        def explode(self, story, **kwargs):
            open(self.filename, "wb").close()
            raise OSError("disk full")

        monkeypatch.setattr(SimpleDocTemplate, "build", explode)

        with pytest.raises(ReportRenderError, match="disk full"):
            renderer.render("Text.", _data_uri(png_bytes))

        assert list(local_storage.reports_dir.iterdir()) == []


class TestFitSize:
    def test_wide_image_limited_by_width(self) -> None:
        assert fit_size(1000, 200) == (500, 100)

    def test_tall_image_limited_by_height(self) -> None:
        assert fit_size(200, 800) == (100, 400)

    def test_small_image_scaled_up(self) -> None:
        assert fit_size(50, 40) == (500, 400)
