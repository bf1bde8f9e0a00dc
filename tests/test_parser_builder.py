"""Unit tests for catalog body parsing and Track building."""

import json

import pytest

from media_catalog.builder import build_track, track_id_for
from media_catalog.exceptions import FetchError, ParseError, RecordError
from media_catalog.models import DEFAULT_ALBUM_ART_URL, UNKNOWN
from media_catalog.parser import parse_records


def record(name="Song", url="http://media.test/song.mp3", size=7, **extra):
    return {"name": name, "url": url, "size": size, **extra}


# ---------------------------------------------------------------------------
# parse_records
# ---------------------------------------------------------------------------

class TestParseRecords:
    def test_returns_records_in_order(self):
        body = json.dumps({"files": [record("A"), record("B")]}).encode()
        records = parse_records(body)
        assert [r["name"] for r in records] == ["A", "B"]

    def test_empty_list(self):
        assert parse_records(b'{"files": []}') == []

    def test_latin1_body(self):
        body = '{"files": [{"name": "Café", "url": "u", "size": 1}]}'.encode("iso-8859-1")
        assert parse_records(body)[0]["name"] == "Café"

    def test_invalid_json(self):
        with pytest.raises(ParseError):
            parse_records(b"<html>not json</html>")

    def test_top_level_not_object(self):
        with pytest.raises(ParseError):
            parse_records(b"[1, 2, 3]")

    def test_missing_files_key(self):
        with pytest.raises(ParseError):
            parse_records(b'{"tracks": []}')

    def test_files_not_a_list(self):
        with pytest.raises(ParseError):
            parse_records(b'{"files": {"name": "x"}}')

    def test_record_not_object(self):
        with pytest.raises(ParseError):
            parse_records(b'{"files": ["x"]}')

    def test_parse_error_is_fetch_error(self):
        with pytest.raises(FetchError):
            parse_records(b"")


# ---------------------------------------------------------------------------
# build_track
# ---------------------------------------------------------------------------

class TestBuildTrack:
    def test_required_fields(self):
        t = build_track(record())
        assert t.title == "Song"
        assert t.source == "http://media.test/song.mp3"
        assert t.track_number == 7

    def test_placeholders_for_missing_attributes(self):
        t = build_track(record())
        assert t.genre == UNKNOWN
        assert t.artist == UNKNOWN
        assert t.album == UNKNOWN
        assert t.album_art_url == DEFAULT_ALBUM_ART_URL

    def test_optional_attributes_used_when_present(self):
        t = build_track(record(genre="Rock", artist="Band", album="LP", image="http://img"))
        assert (t.genre, t.artist, t.album, t.album_art_url) == ("Rock", "Band", "LP", "http://img")

    def test_blank_genre_falls_back_to_placeholder(self):
        assert build_track(record(genre="  ")).genre == UNKNOWN

    def test_id_is_stable_for_same_source(self):
        a = build_track(record(name="First"))
        b = build_track(record(name="Renamed", size=99))
        assert a.id == b.id == track_id_for("http://media.test/song.mp3")

    def test_id_differs_per_source(self):
        assert build_track(record(url="http://a")).id != build_track(record(url="http://b")).id

    def test_size_as_numeric_string(self):
        assert build_track(record(size=" 12 ")).track_number == 12

    @pytest.mark.parametrize("missing", ["name", "url", "size"])
    def test_missing_required_field(self, missing):
        r = record()
        del r[missing]
        with pytest.raises(RecordError) as exc:
            build_track(r, index=4)
        assert exc.value.field == missing
        assert exc.value.index == 4

    def test_integral_float_size_accepted(self):
        t = build_track(record(size=12.0))
        assert t.track_number == 12
        assert isinstance(t.track_number, int)

    def test_fractional_float_size_rejected(self):
        with pytest.raises(RecordError):
            build_track(record(size=12.5))

    def test_numeric_name_read_as_string(self):
        assert build_track(record(name=123)).title == "123"

    @pytest.mark.parametrize("value", [None, True, ["x"]])
    def test_non_scalar_name_rejected(self, value):
        with pytest.raises(RecordError):
            build_track(record(name=value))

    def test_bool_size_rejected(self):
        with pytest.raises(RecordError):
            build_track(record(size=True))

    def test_non_numeric_size_rejected(self):
        with pytest.raises(RecordError):
            build_track(record(size="big"))

    def test_track_is_frozen(self):
        t = build_track(record())
        with pytest.raises(Exception):
            t.title = "other"
