import pytest

from server.api import create_app
from server.range_server import content_disposition, parse_range
from shared.models import RangeSpec

from conftest import BrokenStore, MemoryStore

KEY = "originals/01 Song.mp3"
DATA = bytes(i % 256 for i in range(1000))


@pytest.fixture
def store():
    return MemoryStore({KEY: DATA})


@pytest.fixture
def client(store, config):
    return create_app(config, store=store).test_client()


@pytest.mark.parametrize("header,expected", [
    ("bytes=0-99", RangeSpec(0, 100)),
    ("bytes=500-", RangeSpec(500)),
    ("bytes=0-0", RangeSpec(0, 1)),
    ("bytes=7-7", RangeSpec(7, 1)),
    (" bytes=10-19 ", RangeSpec(10, 10)),
])
def test_parse_range_accepts_single_ranges(header, expected):
    assert parse_range(header) == expected


@pytest.mark.parametrize("header", [
    None, "", "bytes=", "bytes=-100", "bytes=abc-", "items=0-1",
    "bytes=0-1,5-6", "bytes=50-10",
])
def test_parse_range_treats_malformed_as_absent(header):
    assert parse_range(header) is None


def test_range_spec_resolve_clamps_end():
    applied = RangeSpec(900, 500).resolve(1000)
    assert (applied.offset, applied.length, applied.end) == (900, 100, 999)


def test_full_request(client):
    resp = client.get(f"/content/{KEY}")

    assert resp.status_code == 200
    assert resp.headers["Content-Length"] == "1000"
    assert resp.headers["Accept-Ranges"] == "bytes"
    assert "Content-Range" not in resp.headers
    assert resp.headers["Content-Type"] == "audio/mpeg"
    assert resp.headers["Cache-Control"] == "public, max-age=3600"
    assert resp.headers["ETag"] == '"etag-1000"'
    assert resp.headers["Last-Modified"] == "Wed, 01 May 2024 12:00:00 GMT"
    assert resp.headers["Content-Disposition"] == 'inline; filename="01 Song.mp3"'
    assert resp.data == DATA


def test_bounded_range(client, store):
    resp = client.get(f"/content/{KEY}", headers={"Range": "bytes=0-99"})

    assert resp.status_code == 206
    assert resp.headers["Content-Length"] == "100"
    assert resp.headers["Content-Range"] == "bytes 0-99/1000"
    assert resp.data == DATA[:100]
    assert store.reads == [(KEY, RangeSpec(0, 100))]


def test_open_range(client):
    resp = client.get(f"/content/{KEY}", headers={"Range": "bytes=500-"})

    assert resp.status_code == 206
    assert resp.headers["Content-Length"] == "500"
    assert resp.headers["Content-Range"] == "bytes 500-999/1000"
    assert resp.data == DATA[500:]


def test_range_past_end_is_clamped_by_store(client):
    resp = client.get(f"/content/{KEY}", headers={"Range": "bytes=900-2000"})

    assert resp.status_code == 206
    assert resp.headers["Content-Range"] == "bytes 900-999/1000"
    assert resp.headers["Content-Length"] == "100"
    assert resp.data == DATA[900:]


@pytest.mark.parametrize("header", ["bytes=abc", "bytes=50-10", "bytes=0-1,5-6"])
def test_malformed_range_serves_full_object(client, header):
    resp = client.get(f"/content/{KEY}", headers={"Range": header})

    assert resp.status_code == 200
    assert resp.headers["Content-Length"] == "1000"
    assert "Content-Range" not in resp.headers


def test_range_beyond_object_is_not_satisfiable(client):
    resp = client.get(f"/content/{KEY}", headers={"Range": "bytes=1000-"})

    assert resp.status_code == 416
    assert resp.headers["Content-Range"] == "bytes */1000"


def test_missing_key_is_404(client):
    resp = client.get("/content/originals/nope.mp3")

    assert resp.status_code == 404
    assert resp.data == b"Not found"
    assert "ETag" not in resp.headers
    assert "Accept-Ranges" not in resp.headers


def test_head_reads_no_bytes(client, store):
    resp = client.head(f"/content/{KEY}", headers={"Range": "bytes=0-99"})

    assert resp.status_code == 206
    assert resp.headers["Content-Length"] == "100"
    assert resp.headers["Content-Range"] == "bytes 0-99/1000"
    assert resp.data == b""
    assert store.reads == []
    assert store.heads == [(KEY, RangeSpec(0, 100))]


def test_head_full(client, store):
    resp = client.head(f"/content/{KEY}")

    assert resp.status_code == 200
    assert resp.headers["Content-Length"] == "1000"
    assert store.reads == []


def test_percent_encoded_key_and_legacy_route(client):
    assert client.get("/content/originals%2F01%20Song.mp3").status_code == 200
    assert client.get(f"/r2/{KEY}", headers={"Range": "bytes=1-2"}).data == DATA[1:3]


def test_stored_content_type_is_used(client, store):
    store.content_types[KEY] = "audio/flac"
    assert client.get(f"/content/{KEY}").headers["Content-Type"] == "audio/flac"


def test_store_failure_is_503(config):
    client = create_app(config, store=BrokenStore()).test_client()

    resp = client.get(f"/content/{KEY}")

    assert resp.status_code == 503
    assert resp.get_json() == {"error": "Object store unavailable"}


def test_content_disposition_non_ascii():
    value = content_disposition("remixes/Café.mp3")
    assert value.startswith('inline; filename="Caf?.mp3"')
    assert "filename*=UTF-8''Caf%C3%A9.mp3" in value
