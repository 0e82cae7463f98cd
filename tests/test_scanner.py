"""Directory walking and work list collection."""

from __future__ import annotations

import struct
from pathlib import Path

from conftest import write_file

from static2jxl.core import config as run_limits
from static2jxl.core.config import MIN_LOSSLESS_SIZE
from static2jxl.core.models import FormatTag, Mode, SkipReason
from static2jxl.core.scanner import collect_work_items
from static2jxl.core.stats import RunStats

PNG = b"\x89PNG\r\n\x1a\n"
JPEG = b"\xff\xd8\xff\xe0"
BIG = MIN_LOSSLESS_SIZE


def _tiff_with_compression(path: Path, value: int, size: int) -> Path:
    head = b"II*\x00" + struct.pack("<I", 8) + struct.pack("<H", 1)
    head += struct.pack("<HHI", 259, 3, 1) + struct.pack("<H", value) + b"\x00\x00"
    return write_file(path, head, size)


def _populate(root: Path) -> None:
    write_file(root / "photo.jpg", JPEG, 1000)
    write_file(root / "big.png", PNG, BIG)
    write_file(root / "small.png", PNG, BIG - 1)
    write_file(root / "shot.nef", b"\x00\x01\x02\x03", 5000)
    write_file(root / "done.jxl", b"\xff\x0a", 300)
    write_file(root / "notes.txt", b"hello", 5)
    _tiff_with_compression(root / "scan.tif", 5, BIG)
    _tiff_with_compression(root / "lossy.tif", 7, BIG)
    write_file(root / ".hidden.png", PNG, BIG)
    write_file(root / ".cache" / "inside.png", PNG, BIG)
    write_file(root / "nested" / "deep" / "layer.bmp", b"BM", BIG + 10)


def test_collects_eligible_files_and_counts_discards(tmp_path: Path, make_config) -> None:
    _populate(tmp_path)
    stats = RunStats()

    items = collect_work_items(make_config(), stats)

    by_name = {item.path.name: item for item in items}
    assert set(by_name) == {"photo.jpg", "big.png", "scan.tif", "layer.bmp"}
    assert by_name["photo.jpg"].mode is Mode.TRANSCODE_REVERSIBLE
    assert by_name["big.png"].mode is Mode.REENCODE_LOSSLESS
    assert by_name["big.png"].size == BIG
    assert by_name["layer.bmp"].format is FormatTag.BMP

    assert stats.discarded == {
        SkipReason.TOO_SMALL: 1,
        SkipReason.RAW: 1,
        SkipReason.ALREADY_TARGET: 1,
        SkipReason.UNSUPPORTED: 1,
        SkipReason.TIFF_INCOMPATIBLE: 1,
    }
    assert stats.by_format[FormatTag.JPEG] == 1
    assert stats.by_format[FormatTag.TIFF] == 1

    # Every visible file is either queued or counted as discarded.
    walked = 9
    assert len(items) + sum(stats.discarded.values()) == walked


def test_non_recursive_only_visits_top_level(tmp_path: Path, make_config) -> None:
    _populate(tmp_path)

    items = collect_work_items(make_config(recursive=False), RunStats())

    assert "layer.bmp" not in {item.path.name for item in items}
    assert len(items) == 3


def test_order_is_deterministic(tmp_path: Path, make_config) -> None:
    for name in ("c.jpg", "a.jpg", "b.jpg"):
        write_file(tmp_path / name, JPEG, 100)

    items = collect_work_items(make_config(), RunStats())

    assert [item.path.name for item in items] == ["a.jpg", "b.jpg", "c.jpg"]


def test_force_lossless_collects_small_files(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "tiny.png", PNG, 100)
    write_file(tmp_path / "raw.cr2", b"\x00\x00", 100)

    stats = RunStats()
    items = collect_work_items(make_config(force_lossless=True), stats)

    assert [item.path.name for item in items] == ["tiny.png"]
    assert items[0].mode is Mode.REENCODE_LOSSLESS
    assert stats.discarded == {SkipReason.RAW: 1}


def test_work_list_cap_limits_items(tmp_path: Path, make_config, monkeypatch, caplog) -> None:
    for index in range(5):
        write_file(tmp_path / f"{index}.jpg", JPEG, 100)
    monkeypatch.setattr(run_limits, "MAX_WORK_ITEMS", 3)

    with caplog.at_level("WARNING"):
        items = collect_work_items(make_config(), RunStats())

    assert len(items) == 3
    assert "maximum file limit" in caplog.text


def test_empty_directory(tmp_path: Path, make_config) -> None:
    stats = RunStats()
    assert collect_work_items(make_config(), stats) == []
    assert not stats.discarded


def test_files_sharing_an_output_name_are_not_both_queued(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "a.bmp", b"BM", BIG)
    write_file(tmp_path / "a.png", PNG, BIG)
    write_file(tmp_path / "b.jpg", JPEG, 100)
    stats = RunStats()

    items = collect_work_items(make_config(), stats)

    assert [item.path.name for item in items] == ["a.bmp", "b.jpg"]
    assert stats.discarded == {SkipReason.COLLISION: 1}


def test_clashing_output_names_differ_only_in_case(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "Shot.jpg", JPEG, 100)
    write_file(tmp_path / "shot.png", PNG, BIG)

    items = collect_work_items(make_config(), RunStats())

    assert [item.path.name for item in items] == ["Shot.jpg"]


def test_files_past_the_cap_are_counted(tmp_path: Path, make_config, monkeypatch) -> None:
    for index in range(5):
        write_file(tmp_path / f"{index}.jpg", JPEG, 100)
    write_file(tmp_path / "9.txt", b"hello", 5)
    monkeypatch.setattr(run_limits, "MAX_WORK_ITEMS", 3)
    stats = RunStats()

    items = collect_work_items(make_config(), stats)

    assert len(items) == 3
    assert stats.discarded == {SkipReason.OVER_LIMIT: 3}
    assert len(items) + sum(stats.discarded.values()) == 6
