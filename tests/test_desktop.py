"""Icon and desktop entry generation tests."""

from __future__ import annotations

from pathlib import Path, PurePath

import pytest
from PIL import Image

from binbundle.category import Category
from binbundle.desktop import (
    generate_desktop_file,
    generate_icon_files,
    is_retina,
    render_desktop_entry,
)
from binbundle.utils import IconError


def _image(path: Path, size: tuple[int, int], fmt: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA" if fmt == "PNG" else "RGB", size, (200, 40, 40)).save(path, format=fmt)
    return path


def test_is_retina() -> None:
    assert not is_retina(PurePath("data/icons/512x512.png"))
    assert is_retina(PurePath("data/icons/512x512@2x.png"))


class TestGenerateIconFiles:
    def test_installs_pngs_by_size(self, make_settings, project_dir: Path, tmp_path: Path) -> None:
        small = _image(project_dir / "icons" / "32x32.png", (32, 32), "PNG")
        _image(project_dir / "icons" / "128x128@2x.png", (128, 128), "PNG")
        settings = make_settings(icon_patterns=("icons/*.png",))
        data_dir = tmp_path / "data"

        installed = generate_icon_files(settings, data_dir)

        hicolor = data_dir / "usr" / "share" / "icons" / "hicolor"
        assert sorted(installed) == [
            hicolor / "128x128@2x" / "apps" / "foo.png",
            hicolor / "32x32" / "apps" / "foo.png",
        ]
        assert (hicolor / "32x32" / "apps" / "foo.png").read_bytes() == small.read_bytes()

    def test_converts_other_formats(self, make_settings, project_dir: Path, tmp_path: Path) -> None:
        _image(project_dir / "icons" / "logo.bmp", (48, 48), "BMP")
        settings = make_settings(icon_patterns=("icons/logo.bmp",))

        [dest] = generate_icon_files(settings, tmp_path / "data")

        assert dest.parent.parent.name == "48x48"
        with Image.open(dest) as image:
            assert image.format == "PNG"
            assert image.size == (48, 48)

    def test_first_icon_per_size_wins(self, make_settings, project_dir: Path, tmp_path: Path) -> None:
        first = _image(project_dir / "icons" / "a.png", (16, 16), "PNG")
        _image(project_dir / "icons" / "b.png", (16, 16), "PNG")
        settings = make_settings(icon_patterns=("icons/*.png",))

        installed = generate_icon_files(settings, tmp_path / "data")

        assert len(installed) == 1
        assert installed[0].read_bytes() == first.read_bytes()

    def test_unreadable_icons_are_skipped(self, make_settings, project_dir: Path, tmp_path: Path) -> None:
        _image(project_dir / "icons" / "ok.png", (64, 64), "PNG")
        (project_dir / "icons" / "broken.png").write_bytes(b"garbage")
        settings = make_settings(icon_patterns=("icons/*.png",))

        installed = generate_icon_files(settings, tmp_path / "data")

        assert [path.parent.parent.name for path in installed] == ["64x64"]

    def test_decode_failure_raises_icon_error(
        self, make_settings, project_dir: Path, tmp_path: Path, monkeypatch
    ) -> None:
        _image(project_dir / "icons" / "huge.png", (16, 16), "PNG")

        def _bomb(*args, **kwargs):
            raise Image.DecompressionBombError("too many pixels")

        monkeypatch.setattr("binbundle.desktop.Image.open", _bomb)
        settings = make_settings(icon_patterns=("icons/huge.png",))
        with pytest.raises(IconError, match="huge.png"):
            generate_icon_files(settings, tmp_path / "data")

    def test_no_usable_icons(self, make_settings, project_dir: Path, tmp_path: Path) -> None:
        settings = make_settings(icon_patterns=("data/icon.png",))
        with pytest.raises(IconError, match="no usable icon files"):
            generate_icon_files(settings, tmp_path / "data")

    def test_no_icons_declared(self, make_settings, tmp_path: Path) -> None:
        assert generate_icon_files(make_settings(), tmp_path / "data") == []


class TestDesktopEntry:
    def test_full_entry(self, make_settings) -> None:
        settings = make_settings(
            bundle_name="Foo App",
            short_description="A friendly crab",
            category=Category.PUZZLE_GAME,
        )
        assert render_desktop_entry(settings) == (
            "[Desktop Entry]\n"
            "Encoding=UTF-8\n"
            "Categories=Game;LogicGame;\n"
            "Comment=A friendly crab\n"
            "Exec=foo\n"
            "Icon=foo\n"
            "Name=Foo App\n"
            "Terminal=false\n"
            "Type=Application\n"
        )

    def test_optional_lines_omitted(self, make_settings) -> None:
        text = render_desktop_entry(make_settings())
        assert "Categories=" not in text
        assert "Comment=" not in text

    def test_written_under_applications(self, make_settings, tmp_path: Path) -> None:
        dest = generate_desktop_file(make_settings(), tmp_path / "data")
        assert dest == tmp_path / "data" / "usr" / "share" / "applications" / "foo.desktop"
        assert dest.read_text().startswith("[Desktop Entry]\n")
