import time

import pytest

from kapistore.fileinfo import (
    FileRecord,
    Param,
    UploadRequest,
    apply_duplicate_parameters,
    format_timestamp,
    get_file_extension,
    is_able_hotlink,
    is_change_requested,
    is_expired_file,
    is_picture_file,
)


@pytest.fixture
def utc(monkeypatch):
    monkeypatch.setenv("TZ", "UTC")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_format_timestamp(utc):
    assert format_timestamp(2147483600) == "2038-01-19 03:13"
    assert format_timestamp(0) == "1970-01-01 00:00"


@pytest.mark.parametrize(
    "file,expected",
    [
        (FileRecord(expire_at=100, downloads_remaining=1), False),
        (FileRecord(expire_at=10, downloads_remaining=1), True),
        (FileRecord(expire_at=10, downloads_remaining=1, unlimited_time=True), False),
        (FileRecord(expire_at=100, downloads_remaining=0), True),
        (FileRecord(expire_at=100, downloads_remaining=0, unlimited_downloads=True), False),
        (FileRecord(unlimited_time=True, unlimited_downloads=True), False),
    ],
)
def test_is_expired_file(file, expected):
    assert is_expired_file(file, 50) is expected


@pytest.mark.parametrize(
    "name,expected",
    [("test.JPG", ".jpg"), ("archive.tar.gz", ".gz"), ("noext", ""), ("dir.d/file", "")],
)
def test_get_file_extension(name, expected):
    assert get_file_extension(name) == expected


def test_is_picture_file():
    assert is_picture_file("picture.jpg") is True
    assert is_picture_file("anim.APNG") is True
    assert is_picture_file("test.dat") is False


def test_is_able_hotlink_cases():
    assert is_able_hotlink(FileRecord(name="test.dat", id="testId")) is False
    assert is_able_hotlink(FileRecord(name="test.jpg", id="testId")) is True
    encrypted_remote = FileRecord(name="test.jpg", id="testId", is_encrypted=True, aws_bucket="test")
    assert is_able_hotlink(encrypted_remote) is False
    protected = FileRecord(name="test.jpg", password_hash="placeholder")
    assert is_able_hotlink(protected) is False
    encrypted_local = FileRecord(name="test.jpg", is_encrypted=True)
    assert is_able_hotlink(encrypted_local) is True
    e2e = FileRecord(name="test.jpg", is_encrypted=True, is_end_to_end_encrypted=True)
    assert is_able_hotlink(e2e) is False


def test_storage_properties():
    assert FileRecord().is_local_storage is True
    assert FileRecord(aws_bucket="bucket").is_local_storage is False
    assert FileRecord(is_encrypted=True, aws_bucket="bucket").requires_client_decryption is True
    assert FileRecord(aws_bucket="bucket").requires_client_decryption is False


def test_is_change_requested():
    combined = Param.EXPIRY | Param.NAME
    assert is_change_requested(combined, Param.EXPIRY) is True
    assert is_change_requested(combined, Param.NAME) is True
    assert is_change_requested(combined, Param.PASSWORD) is False
    assert int(Param.EXPIRY | Param.DOWNLOADS | Param.PASSWORD | Param.NAME) == 15


@pytest.fixture
def original():
    return FileRecord(
        id="originalid",
        name="test.dat",
        sha1="f1474c19eff0fc8998fa6e1b1f7bf31793b103a6",
        size="35 B",
        expire_at=2147483600,
        expire_at_string="2038-01-19 03:13",
        downloads_remaining=1,
        download_count=5,
    )


@pytest.fixture
def request_params():
    password = "password"
    return UploadRequest(
        allowed_downloads=5,
        expiry=5,
        expiry_timestamp=200000,
        password=password,
        unlimited_download=True,
        unlimited_time=True,
    )


def test_duplicate_without_changes(original):
    new = apply_duplicate_parameters(original, 0, "123", UploadRequest(), "newid", "secret")
    assert new.id == "newid"
    assert new.download_count == 0
    assert new.downloads_remaining == 1
    assert new.expire_at == 2147483600
    assert new.password_hash == ""
    assert new.unlimited_downloads is False
    assert new.unlimited_time is False
    assert new.name == "test.dat"
    assert original.download_count == 5
    assert original.id == "originalid"


def test_duplicate_ignores_request_without_flags(original, request_params):
    new = apply_duplicate_parameters(original, 0, "123", request_params, "newid", "secret")
    assert new.downloads_remaining == 1
    assert new.expire_at == 2147483600
    assert new.password_hash == ""
    assert new.name == "test.dat"


def test_duplicate_name(original, request_params):
    new = apply_duplicate_parameters(original, Param.NAME, "123", request_params, "newid", "secret")
    assert new.name == "123"
    assert new.expire_at == 2147483600
    assert new.downloads_remaining == 1


def test_duplicate_expiry(original, request_params, utc):
    new = apply_duplicate_parameters(original, Param.EXPIRY, "123", request_params, "newid", "secret")
    assert new.expire_at == 200000
    assert new.expire_at_string == "1970-01-03 07:33"
    assert new.unlimited_time is True
    assert new.unlimited_downloads is False
    assert new.downloads_remaining == 1


def test_duplicate_downloads(original, request_params):
    new = apply_duplicate_parameters(
        original, Param.DOWNLOADS, "123", request_params, "newid", "secret"
    )
    assert new.downloads_remaining == 5
    assert new.unlimited_downloads is True
    assert new.unlimited_time is False
    assert new.expire_at == 2147483600


def test_duplicate_password(original, request_params):
    new = apply_duplicate_parameters(
        original, Param.PASSWORD, "123", request_params, "newid", "secret"
    )
    assert new.password_hash == "secret"
    assert new.downloads_remaining == 1


def test_duplicate_keeps_existing_password(original, request_params):
    original.password_hash = "placeholder"
    new = apply_duplicate_parameters(original, 0, "123", request_params, "newid", "secret")
    assert new.password_hash == "placeholder"
    cleared = apply_duplicate_parameters(original, Param.PASSWORD, "123", UploadRequest(), "id2", "")
    assert cleared.password_hash == ""


def test_duplicate_all(original, request_params):
    flags = Param.EXPIRY | Param.PASSWORD | Param.DOWNLOADS | Param.NAME
    new = apply_duplicate_parameters(original, flags, "123", request_params, "newid", "secret")
    assert new.download_count == 0
    assert new.downloads_remaining == 5
    assert new.expire_at == 200000
    assert new.password_hash == "secret"
    assert new.unlimited_downloads is True
    assert new.unlimited_time is True
    assert new.name == "123"
    assert new.sha1 == original.sha1