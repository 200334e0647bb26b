import threading

import pytest

from folioexif.cache import ExifCache
from folioexif.config import FallbackCamera, PortfolioSettings
from folioexif.exceptions import FetchError
from folioexif.extractor import ExifExtractor, ExtractionStatus

SONY = FallbackCamera(make='Sony', model='A7R III', lens='Sony 20-70mm f/4 G', photographer='Simon Hajduk')


class CountingFetcher:
    """Serves bytes from a dict and counts fetches per path."""

    def __init__(self, files):
        self.files = files
        self.calls = {}
        self._lock = threading.Lock()

    def __call__(self, path):
        with self._lock:
            self.calls[path] = self.calls.get(path, 0) + 1
        if path not in self.files:
            raise FetchError(f"404 {path}")
        return self.files[path]


@pytest.fixture
def gallery(jpeg_factory, exif_builder):
    return {
        'photos/iso.jpg': jpeg_factory(exif_builder(b'II').add_short(0x8827, 100).build()),
        'photos/plain.jpg': jpeg_factory(None),
        'photos/logo.png': b'\x89PNG\r\n\x1a\n' + b'\x00' * 16,
        'photos/xmp.jpg': jpeg_factory(b'http://ns.adobe.com/xap/1.0/\x00<x/>'),
        'photos/empty.jpg': b'',
    }


def test_extract_decodes_exif(gallery):
    extractor = ExifExtractor(fetcher=CountingFetcher(gallery))

    assert extractor.extract('photos/iso.jpg') == {'ISO': 100}


@pytest.mark.parametrize("path, status", [
    ('photos/iso.jpg', ExtractionStatus.OK),
    ('photos/plain.jpg', ExtractionStatus.NO_SEGMENT),
    ('photos/logo.png', ExtractionStatus.NOT_JPEG),
    ('photos/xmp.jpg', ExtractionStatus.NOT_EXIF),
    ('photos/empty.jpg', ExtractionStatus.NOT_JPEG),
    ('photos/missing.jpg', ExtractionStatus.FETCH_FAILED),
])
def test_extract_result_status(gallery, path, status):
    result = ExifExtractor(fetcher=CountingFetcher(gallery)).extract_result(path)

    assert result.status is status
    assert result.path == path
    assert result.has_metadata == (status is ExtractionStatus.OK)


def test_no_metadata_is_none_not_error(gallery):
    extractor = ExifExtractor(fetcher=CountingFetcher(gallery))

    assert extractor.extract('photos/plain.jpg') is None
    assert extractor.extract('photos/logo.png') is None
    assert extractor.extract('photos/missing.jpg') is None


def test_each_path_fetched_once(gallery):
    fetcher = CountingFetcher(gallery)
    extractor = ExifExtractor(fetcher=fetcher)

    for _ in range(3):
        extractor.extract('photos/iso.jpg')
        extractor.extract('photos/plain.jpg')

    assert fetcher.calls == {'photos/iso.jpg': 1, 'photos/plain.jpg': 1}
    assert extractor.extract_result('photos/plain.jpg').cached


def test_fetch_failures_are_retried(gallery):
    fetcher = CountingFetcher(gallery)
    extractor = ExifExtractor(fetcher=fetcher)

    extractor.extract('photos/missing.jpg')
    extractor.extract('photos/missing.jpg')

    assert fetcher.calls['photos/missing.jpg'] == 2
    assert 'photos/missing.jpg' not in extractor.cache


def test_cache_is_shared_between_extractors(gallery):
    cache = ExifCache()
    fetcher = CountingFetcher(gallery)

    ExifExtractor(cache=cache, fetcher=fetcher).extract('photos/iso.jpg')
    result = ExifExtractor(cache=cache, fetcher=fetcher).extract_result('photos/iso.jpg')

    assert fetcher.calls['photos/iso.jpg'] == 1
    assert result.cached
    assert result.exif_data == {'ISO': 100}


def test_returned_maps_do_not_alias_cache(gallery):
    extractor = ExifExtractor(fetcher=CountingFetcher(gallery))

    first = extractor.extract('photos/iso.jpg')
    first['ISO'] = 6400

    assert extractor.extract('photos/iso.jpg') == {'ISO': 100}


def test_disabled_extractor_never_fetches(gallery):
    fetcher = CountingFetcher(gallery)
    extractor = ExifExtractor.from_settings(PortfolioSettings(enable_metadata_extraction=False), fetcher=fetcher)

    result = extractor.extract_result('photos/iso.jpg')
    assert result.status is ExtractionStatus.DISABLED
    assert fetcher.calls == {}


def test_from_settings_uses_timeout():
    extractor = ExifExtractor.from_settings(PortfolioSettings(fetch_timeout=3.5))

    assert extractor.timeout == 3.5
    assert extractor.enabled


def test_extract_many_sequential(gallery):
    extractor = ExifExtractor(fetcher=CountingFetcher(gallery))

    results = extractor.extract_many(['photos/iso.jpg', 'photos/plain.jpg', 'photos/missing.jpg'])
    assert results == {'photos/iso.jpg': {'ISO': 100}, 'photos/plain.jpg': None, 'photos/missing.jpg': None}
    assert list(results) == ['photos/iso.jpg', 'photos/plain.jpg', 'photos/missing.jpg']


def test_extract_many_threaded_decodes_once(gallery):
    fetcher = CountingFetcher(gallery)
    extractor = ExifExtractor(fetcher=fetcher)
    paths = ['photos/iso.jpg', 'photos/plain.jpg', 'photos/logo.png'] * 10

    results = extractor.extract_many(paths, max_workers=8)

    assert results['photos/iso.jpg'] == {'ISO': 100}
    assert fetcher.calls == {'photos/iso.jpg': 1, 'photos/plain.jpg': 1, 'photos/logo.png': 1}


def test_describe_with_fallback(gallery):
    extractor = ExifExtractor(fetcher=CountingFetcher(gallery))

    assert extractor.describe('photos/plain.jpg', SONY) == {
        'Camera': 'Sony A7R III',
        'Lens': 'Sony 20-70mm f/4 G',
        'Photographer': 'Simon Hajduk',
    }
    assert extractor.describe('photos/iso.jpg', SONY)['ISO'] == 'ISO 100'


def test_local_files_through_default_fetcher(tmp_path, jpeg_factory, exif_builder):
    path = tmp_path / "a.jpg"
    path.write_bytes(jpeg_factory(exif_builder(b'MM').add_short(0xA403, 1).build()))

    extractor = ExifExtractor()
    assert extractor.extract(path) == {'WhiteBalance': 1}
    assert str(path) in extractor.cache


def test_follow_rational_offsets_flag(camera_jpeg):
    inline = ExifExtractor(fetcher=lambda path: camera_jpeg)
    following = ExifExtractor(fetcher=lambda path: camera_jpeg, follow_rational_offsets=True)

    assert following.extract('a.jpg')['FNumber'] == 4.0
    assert inline.extract('a.jpg').get('FNumber') != 4.0


def test_unexpected_fetcher_error_is_absorbed(caplog):
    def fetcher(path):
        raise RuntimeError('boom')

    extractor = ExifExtractor(fetcher=fetcher)
    with caplog.at_level('WARNING', logger='folioexif.extractor'):
        result = extractor.extract_result('a.jpg')

    assert result.status is ExtractionStatus.FETCH_FAILED
    assert result.exif_data is None
    assert 'a.jpg' not in extractor.cache
    assert 'boom' in caplog.text


@pytest.mark.parametrize("location", [
    'http://exa mple.com/\x00a.jpg',
    'photos/a\x00.jpg',
])
def test_unreadable_locations_through_default_fetcher(location):
    extractor = ExifExtractor()

    assert extractor.extract_result(location).status is ExtractionStatus.FETCH_FAILED
    assert extractor.describe(location, SONY) == {
        'Camera': 'Sony A7R III',
        'Lens': 'Sony 20-70mm f/4 G',
        'Photographer': 'Simon Hajduk',
    }
