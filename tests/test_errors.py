from space_storage.errors import (
    SpaceStorageError,
    UnauthenticatedError,
    DirEntryNotFoundError,
    BucketsApiError,
)


def test_unauthenticated_error():
    error = UnauthenticatedError()
    assert isinstance(error, SpaceStorageError)
    assert error.details == {}


def test_dir_entry_not_found_error():
    error = DirEntryNotFoundError("photos/cat.png", "personal")
    assert isinstance(error, SpaceStorageError)
    assert error.path == "photos/cat.png"
    assert error.bucket == "personal"
    assert "photos/cat.png" in str(error) and "personal" in str(error)
    assert error.details == {"path": "photos/cat.png", "bucket": "personal"}


def test_buckets_api_error():
    error = BucketsApiError("no link named x", 404)
    assert str(error) == "no link named x"
    assert error.status_code == 404
    assert error.details == {"status_code": "404"}
    assert BucketsApiError("timeout").details == {}
