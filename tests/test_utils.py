from pathlib import Path

from cover_fallback.utils import generate_token, scratch_path, slugify, truncate


def test_slugify_basic() -> None:
    assert slugify("Hello World!.pdf") == "Hello-World.pdf"


def test_generate_token_unique() -> None:
    tokens = {generate_token() for _ in range(50)}
    assert len(tokens) == 50


def test_truncate() -> None:
    assert truncate("abc", 200) == "abc"
    assert truncate("x" * 300) == "x" * 200


def test_scratch_path_removes_leftovers(tmp_path: Path) -> None:
    with scratch_path(tmp_path, "cover-pdf", ".jpg") as path:
        assert path.parent == tmp_path
        assert path.name.startswith("cover-pdf-")
        path.write_bytes(b"partial")
    assert not path.exists()


def test_scratch_path_removes_on_error(tmp_path: Path) -> None:
    try:
        with scratch_path(tmp_path, "cover-art") as path:
            path.write_bytes(b"partial")
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert list(tmp_path.iterdir()) == []


def test_scratch_paths_do_not_collide(tmp_path: Path) -> None:
    with scratch_path(tmp_path, "cover-pdf") as first, scratch_path(tmp_path, "cover-pdf") as second:
        assert first != second
