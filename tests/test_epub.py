import asyncio
import zipfile
from pathlib import Path

from conftest import make_epub, make_prober

from cover_fallback.adapters.epub import EPUBAdapter, collect_candidates, locate_cover
from cover_fallback.config import ExtractionConfig
from cover_fallback.models import ImageFormat


def blob(size: int, fill: bytes = b"a") -> bytes:
    return fill * size


def test_exact_cover_name_wins_over_larger_images(tmp_path: Path) -> None:
    epub = make_epub(
        tmp_path / "book.epub",
        {
            "cover.jpg": blob(800, b"c"),
            "random.png": blob(50000),
            "folder/cover-small.jpg": blob(10),
        },
    )
    result = locate_cover(epub)
    assert result.image == blob(800, b"c")
    assert result.image_format is ImageFormat.JPEG


def test_largest_name_match_is_chosen(tmp_path: Path) -> None:
    epub = make_epub(
        tmp_path / "book.epub",
        {"OEBPS/cover.jpg": blob(100), "OEBPS/Images/Front.PNG": blob(300, b"f")},
    )
    result = locate_cover(epub)
    assert result.image == blob(300, b"f")
    assert result.image_format is ImageFormat.PNG


def test_path_substring_tier_beats_size(tmp_path: Path) -> None:
    epub = make_epub(
        tmp_path / "book.epub",
        {
            "OEBPS/images/my-cover-art.png": blob(6000, b"m"),
            "OEBPS/images/logo.png": blob(9000),
        },
    )
    result = locate_cover(epub)
    assert result.image == blob(6000, b"m")
    assert result.image_format is ImageFormat.PNG


def test_path_tier_matches_directory_names(tmp_path: Path) -> None:
    epub = make_epub(
        tmp_path / "book.epub",
        {"OEBPS/CoverPages/image1.gif": blob(20, b"g"), "OEBPS/big.jpg": blob(90000)},
    )
    result = locate_cover(epub)
    assert result.image == blob(20, b"g")
    assert result.image_format is ImageFormat.GIF


def test_size_tier_picks_largest_above_threshold(tmp_path: Path) -> None:
    epub = make_epub(
        tmp_path / "book.epub",
        {"images/a.jpg": blob(3000), "images/b.webp": blob(8000, b"b")},
    )
    result = locate_cover(epub)
    assert result.image == blob(8000, b"b")
    assert result.image_format is ImageFormat.WEBP


def test_size_tier_ignores_small_images(tmp_path: Path) -> None:
    epub = make_epub(
        tmp_path / "book.epub",
        {"images/a.jpg": blob(3000), "images/b.png": blob(5000)},
    )
    assert not locate_cover(epub).has_image


def test_archive_without_images(tmp_path: Path) -> None:
    epub = make_epub(
        tmp_path / "book.epub",
        {"OEBPS/content.opf": b"<package/>", "OEBPS/cover.xhtml": blob(9000)},
    )
    assert not locate_cover(epub).has_image


def test_unmapped_extensions_default_to_jpeg(tmp_path: Path) -> None:
    epub = make_epub(tmp_path / "book.epub", {"cover.tiff": blob(700)})
    assert locate_cover(epub).image_format is ImageFormat.JPEG
    epub = make_epub(tmp_path / "bmp.epub", {"Cover.BMP": blob(700)})
    assert locate_cover(epub).image_format is ImageFormat.BMP


def test_empty_cover_entry_is_no_image(tmp_path: Path) -> None:
    epub = make_epub(tmp_path / "book.epub", {"cover.jpg": b"", "other.png": blob(9000)})
    assert not locate_cover(epub).has_image


def test_corrupt_or_missing_archive(tmp_path: Path) -> None:
    broken = tmp_path / "broken.epub"
    broken.write_bytes(b"PK\x03\x04 definitely not a zip")
    assert not locate_cover(broken).has_image
    assert not locate_cover(tmp_path / "missing.epub").has_image


def test_directory_entries_are_skipped(tmp_path: Path) -> None:
    path = tmp_path / "dirs.epub"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("cover.jpg/", b"")
        archive.writestr("images/pic.png", blob(10))
        candidates = collect_candidates(archive.infolist())
    assert [candidate.path for candidate in candidates] == ["images/pic.png"]


def test_adapter_runs_without_external_tools(tmp_path: Path) -> None:
    epub = make_epub(tmp_path / "book.epub", {"portada.png": blob(50, b"p")})
    prober = make_prober(tmp_path)
    result = asyncio.run(EPUBAdapter().extract(epub, ExtractionConfig(), prober))
    assert result.image == blob(50, b"p")
    assert prober.launches == 0
