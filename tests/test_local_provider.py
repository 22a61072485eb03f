import pytest

from shared.errors import RangeNotSatisfiableError
from shared.models import AppliedRange, RangeSpec
from storage.key_lister import list_banks, list_keys
from storage.local_provider import LocalStorageProvider
from storage.provider_factory import StorageProviderFactory, connect_store
from shared.config import ServiceConfig
from shared.models import StorageProvider


@pytest.fixture
def root(tmp_path):
    (tmp_path / "originals").mkdir()
    (tmp_path / "remixes").mkdir()
    (tmp_path / "originals" / "01 Dawn.mp3").write_bytes(bytes(range(100)))
    (tmp_path / "originals" / "02 Noon.flac").write_bytes(b"flac")
    (tmp_path / "remixes" / "01 Dawn Remix.mp3").write_bytes(b"remix")
    return tmp_path


@pytest.fixture
def provider(root):
    store = LocalStorageProvider()
    assert store.authenticate({"base_path": str(root)})
    return store


def test_authenticate_requires_path():
    assert not LocalStorageProvider().authenticate({})


def test_listing_is_sorted_and_paged(root):
    store = LocalStorageProvider(str(root), page_size=1)

    assert list_keys(store, "originals/") == ["originals/01 Dawn.mp3", "originals/02 Noon.flac"]


def test_list_banks(provider):
    originals, remixes = list_banks(provider, "originals/", "remixes/")

    assert originals == ["originals/01 Dawn.mp3", "originals/02 Noon.flac"]
    assert remixes == ["remixes/01 Dawn Remix.mp3"]


def test_get_range(provider):
    result = provider.get_object("originals/01 Dawn.mp3", RangeSpec(10, 5))

    assert result.total_size == 100
    assert result.applied_range == AppliedRange(10, 5)
    assert result.read() == bytes(range(10, 15))
    assert result.content_type == "audio/mpeg"


def test_get_open_range_to_end(provider):
    result = provider.get_object("originals/01 Dawn.mp3", RangeSpec(95))

    assert result.read() == bytes(range(95, 100))


def test_get_full_object(provider):
    result = provider.get_object("originals/02 Noon.flac")

    assert result.applied_range is None
    assert result.read() == b"flac"
    assert result.etag.startswith('"')
    assert result.last_modified is not None


def test_range_past_end(provider):
    with pytest.raises(RangeNotSatisfiableError) as info:
        provider.get_object("originals/01 Dawn.mp3", RangeSpec(100))
    assert info.value.total_size == 100


def test_missing_and_escaping_keys(provider):
    assert provider.get_object("originals/nope.mp3") is None
    assert provider.get_object("../outside.mp3") is None
    assert provider.head_object("originals") is None


def test_head_has_no_body(provider):
    result = provider.head_object("remixes/01 Dawn Remix.mp3", RangeSpec(0, 2))

    assert result.body is None
    assert result.content_length == 2


def test_json_round_trip(provider, root):
    written = provider.upload_json({"pairs": []}, "playlist.json")

    assert written == (root / "playlist.json").stat().st_size
    assert provider.download_json("playlist.json") == '{\n  "pairs": []\n}'
    assert provider.download_json("other.json") is None


def test_put_rejects_escaping_key(provider):
    with pytest.raises(ValueError):
        provider.put_object("../evil.json", b"{}")


def test_factory_creates_providers():
    assert isinstance(StorageProviderFactory.create(StorageProvider.LOCAL), LocalStorageProvider)
    assert StorageProviderFactory.get_provider_name(StorageProvider.CLOUDFLARE_R2) == "Cloudflare R2"


def test_connect_store(root):
    assert connect_store(ServiceConfig()) is None

    store = connect_store(ServiceConfig(provider=StorageProvider.LOCAL, base_path=str(root)))

    assert isinstance(store, LocalStorageProvider)
    assert store.get_object("remixes/01 Dawn Remix.mp3").read() == b"remix"
