import asyncio
import logging
import subprocess

import pytest

from overprint.core.errors import AccessDenied, UnsupportedPlatform
from overprint.core.fonts.directory import (
    FontDirectory,
    detect_font_format,
    disambiguate,
    find_best_match,
    group_by_family,
    resolve_index,
)
from overprint.core.fonts.models import FontFormat, LocalFontDescriptor
from overprint.core.fonts.source import FontconfigSource, PlatformFont, parse_fc_list
from overprint.core.fonts.store import LoadedFontStore

from .conftest import FakeFontSource, write_font_file


def _font(ps, family="Inter", full_name=None, style="Regular", path="/fonts/x.ttf"):
    return PlatformFont(
        family=family,
        full_name=full_name or f"{family} {style}",
        postscript_name=ps,
        style=style,
        path=path,
    )


def test_disambiguate_suffixes_duplicates_in_discovery_order():
    fonts = [
        _font("Inter-Regular"),
        _font("Inter-Bold", style="Bold"),
        _font("Inter-Regular", full_name="Inter Regular"),
        _font("Inter-Regular", full_name="Inter Variable"),
    ]

    descriptors = disambiguate(fonts)

    assert [d.postscript_name for d in descriptors] == [
        "Inter-Regular", "Inter-Bold", "Inter-Regular#1", "Inter-Regular#2",
    ]
    assert descriptors[0].family == "Inter"
    assert descriptors[2].family == "Inter (Variant 1)"
    assert descriptors[3].family == "Inter (Variable)"
    assert descriptors[2].raw_postscript_name == "Inter-Regular"
    assert descriptors[1].weight == 700


def test_disambiguated_names_are_unique():
    fonts = [_font("Dup") for _ in range(5)]
    names = [d.postscript_name for d in disambiguate(fonts)]
    assert len(set(names)) == len(names)


def test_custom_variant_marker():
    fonts = [_font("A"), _font("A", full_name="Inter VF")]
    assert disambiguate(fonts, marker="VF")[1].family == "Inter (VF)"


def test_resolve_index_picks_nth_occurrence():
    fonts = [_font("A"), _font("B"), _font("A"), _font("A")]
    assert resolve_index(fonts, "A") == 0
    assert resolve_index(fonts, "A#1") == 2
    assert resolve_index(fonts, "A#2") == 3
    assert resolve_index(fonts, "A#3") is None
    assert resolve_index(fonts, "C") is None


def test_resolve_index_without_base_matches_exactly():
    fonts = [_font("Weird#1")]
    assert resolve_index(fonts, "Weird#1") == 0


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"%!PS-AdobeFont-1.0", FontFormat.TYPE1),
        (b"\x00\x01\x00\x00", FontFormat.TRUETYPE),
        (b"OTTO", FontFormat.TRUETYPE),
        (b"wOFF", FontFormat.TRUETYPE),
        (b"%", FontFormat.TRUETYPE),
        (b"", FontFormat.TRUETYPE),
    ],
)
def test_detect_font_format(data, expected):
    assert detect_font_format(data) == expected


def test_group_by_family_keeps_order():
    descriptors = disambiguate([
        _font("Inter-Regular"),
        _font("Roboto-Regular", family="Roboto"),
        _font("Inter-Bold", style="Bold"),
    ])
    grouped = group_by_family(descriptors)
    assert list(grouped) == ["Inter", "Roboto"]
    assert [d.postscript_name for d in grouped["Inter"]] == ["Inter-Regular", "Inter-Bold"]


def _variant(ps, weight, italic):
    return LocalFontDescriptor(family="Inter", full_name=ps, postscript_name=ps,
                               style="", weight=weight, italic=italic)


def test_find_best_match():
    variants = [_variant("R", 400, False), _variant("M", 500, False), _variant("BI", 700, True)]
    assert find_best_match(variants, 500, False).postscript_name == "M"
    assert find_best_match(variants, 650, True).postscript_name == "BI"
    assert find_best_match(variants, 900, False).postscript_name == "R"
    assert find_best_match([], 400, False) is None


def test_parse_fc_list():
    output = (
        "/usr/share/fonts/Inter.ttf|0|Inter,Inter Display|Regular,Normal|Inter Regular|Inter-Regular\n"
        "/usr/share/fonts/Odd.ttf||Odd|||\n"
        "garbage line\n"
        "|0|NoFile|Regular|NoFile Regular|NoFile-Regular\n"
    )
    fonts = parse_fc_list(output)
    assert len(fonts) == 2
    assert fonts[0] == PlatformFont("Inter", "Inter Regular", "Inter-Regular", "Regular",
                                    "/usr/share/fonts/Inter.ttf")
    assert fonts[1].style == "Regular"
    assert fonts[1].full_name == "Odd Regular"
    assert fonts[1].postscript_name == "Odd-Regular"


def test_request_access_emits_and_snapshots():
    source = FakeFontSource([_font("A"), _font("A")])
    directory = FontDirectory(source)
    granted = []
    directory.on_access_granted(granted.append)

    fonts = asyncio.run(directory.request_access())

    assert [f.postscript_name for f in fonts] == ["A", "A#1"]
    assert directory.has_permission
    assert not directory.is_loading
    assert granted == [fonts]
    assert directory.get_local_fonts() == fonts


def test_request_access_denied():
    directory = FontDirectory(FakeFontSource([_font("A")], deny=True))
    denied = []
    directory.on_access_denied(denied.append)

    with pytest.raises(AccessDenied):
        asyncio.run(directory.request_access())

    assert not directory.has_permission
    assert len(denied) == 1
    assert isinstance(denied[0], AccessDenied)


def test_unsupported_platform():
    directory = FontDirectory(FakeFontSource([], supported=False))
    denied = []
    directory.on_access_denied(denied.append)

    assert not directory.is_supported()
    with pytest.raises(UnsupportedPlatform):
        asyncio.run(directory.request_access())
    with pytest.raises(UnsupportedPlatform):
        asyncio.run(directory.load("A"))
    assert len(denied) == 1


def test_load_resolves_duplicate_by_occurrence(tmp_path):
    fonts = [
        _font("A", path=write_font_file(tmp_path, "a0.ttf", b"\x00\x01first")),
        _font("A", path=write_font_file(tmp_path, "a1.ttf", b"\x00\x01second")),
        _font("A", full_name="Inter Italic", style="Italic",
              path=write_font_file(tmp_path, "a2.ttf", b"%!third")),
    ]
    directory = FontDirectory(FakeFontSource(fonts))
    loaded = []
    directory.on_font_loaded(loaded.append)

    font = asyncio.run(directory.load("A#2"))

    assert font.data == b"%!third"
    assert font.postscript_name == "A#2"
    assert font.family == "Inter (Variant 2)"
    assert font.font_format == FontFormat.TYPE1
    assert font.italic
    assert directory.is_font_loaded("A#2")
    assert not directory.is_font_loaded("A")
    assert loaded == [font]


def test_load_is_cached(tmp_path):
    source = FakeFontSource([_font("A", path=write_font_file(tmp_path, "a.ttf"))])
    directory = FontDirectory(source)

    first = asyncio.run(directory.load("A"))
    second = asyncio.run(directory.load("A"))

    assert first is second
    assert source.queries == 1


def test_load_missing_font_returns_none(tmp_path):
    directory = FontDirectory(FakeFontSource([_font("A", path=write_font_file(tmp_path, "a.ttf"))]))
    assert asyncio.run(directory.load("B")) is None
    assert asyncio.run(directory.load("A#1")) is None


def test_load_read_error_emits_and_returns_none(tmp_path):
    directory = FontDirectory(FakeFontSource([_font("A", path=str(tmp_path / "gone.ttf"))]))
    errors = []
    directory.on_font_load_error(lambda name, error: errors.append((name, error)))

    assert asyncio.run(directory.load("A")) is None
    assert len(errors) == 1
    assert errors[0][0] == "A"
    assert isinstance(errors[0][1], OSError)


def test_unsubscribe_stops_notifications(tmp_path):
    directory = FontDirectory(FakeFontSource([_font("A", path=write_font_file(tmp_path, "a.ttf"))]))
    loaded = []
    unsubscribe = directory.on_font_loaded(loaded.append)
    unsubscribe()
    unsubscribe()

    asyncio.run(directory.load("A"))

    assert loaded == []


def test_clear_loaded_fonts(tmp_path):
    directory = FontDirectory(FakeFontSource([_font("A", path=write_font_file(tmp_path, "a.ttf"))]))
    asyncio.run(directory.load("A"))
    directory.clear_loaded_fonts()
    assert directory.get_loaded_font("A") is None


def test_loaded_font_store(tmp_path):
    store = LoadedFontStore()
    directory = FontDirectory(FakeFontSource([
        _font("A", path=write_font_file(tmp_path, "a.ttf", b"aaaa")),
        _font("B", path=write_font_file(tmp_path, "b.ttf", b"bbbb")),
    ]), store=store)

    asyncio.run(directory.load("A"))
    asyncio.run(directory.load("B"))

    assert len(store) == 2
    assert [font.postscript_name for font in store] == ["A", "B"]
    assert store.data_map() == {"A": b"aaaa", "B": b"bbbb"}


def test_aliases_and_grouping():
    directory = FontDirectory(FakeFontSource([_font("A"), _font("B", family="Other")]))

    asyncio.run(directory.request_font_access())

    assert list(directory.group_fonts_by_family()) == ["Inter", "Other"]
    assert FontDirectory.load_font is FontDirectory.load


def test_load_after_access_does_not_prompt_again(tmp_path, monkeypatch):
    path = write_font_file(tmp_path, "demo.ttf", b"\x00\x01demo")
    monkeypatch.setattr("overprint.core.fonts.source.shutil.which", lambda name: "/usr/bin/fc-list")
    monkeypatch.setattr(
        "overprint.core.fonts.source.subprocess.run",
        lambda args, **kwargs: subprocess.CompletedProcess(
            args, 0, stdout=f"{path}|0|Demo|Regular|Demo Regular|Demo-Regular\n", stderr=""),
    )
    answers = iter([True, False])
    prompts = []

    def confirm():
        prompts.append(True)
        return next(answers)

    directory = FontDirectory(FontconfigSource(confirm=confirm))

    asyncio.run(directory.request_access())
    font = asyncio.run(directory.load("Demo-Regular"))

    assert len(prompts) == 1
    assert font.data == b"\x00\x01demo"


def test_load_requests_access_once_when_not_granted(tmp_path):
    source = FakeFontSource([
        _font("A", path=write_font_file(tmp_path, "a.ttf")),
        _font("B", path=write_font_file(tmp_path, "b.ttf")),
    ])
    directory = FontDirectory(source)
    granted = []
    directory.on_access_granted(granted.append)

    asyncio.run(directory.load("A"))
    asyncio.run(directory.load("B"))

    assert directory.has_permission
    assert source.queries == 1
    assert source.enumerations == 2
    assert len(granted) == 1


def test_discovery_failure_is_not_reported_as_denial():
    directory = FontDirectory(FakeFontSource([], error=OSError("fc-list crashed")))
    denied = []
    directory.on_access_denied(denied.append)

    with pytest.raises(OSError):
        asyncio.run(directory.request_access())

    assert denied == []
    assert not directory.has_permission
    assert not directory.is_loading


def test_parse_fc_list_records_collection_face():
    fonts = parse_fc_list(
        "/f/Noto.ttc|0|Noto Sans CJK|Regular|Noto Sans CJK Regular|NotoSansCJK-Regular\n"
        "/f/Noto.ttc|2|Noto Sans CJK|Bold|Noto Sans CJK Bold|NotoSansCJK-Bold\n"
    )
    assert [f.face_index for f in fonts] == [0, 2]
    assert fonts[0].path == fonts[1].path


def test_load_collection_face_keeps_index_and_warns(tmp_path, caplog):
    path = write_font_file(tmp_path, "noto.ttc", b"ttcf")
    directory = FontDirectory(FakeFontSource([
        PlatformFont("Noto", "Noto Regular", "Noto-Regular", "Regular", path, face_index=0),
        PlatformFont("Noto", "Noto Bold", "Noto-Bold", "Bold", path, face_index=1),
    ]))

    with caplog.at_level(logging.WARNING, logger="overprint.core.fonts.directory"):
        font = asyncio.run(directory.load("Noto-Bold"))

    assert font.face_index == 1
    assert font.weight == 700
    assert "face 1" in caplog.text
