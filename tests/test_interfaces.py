import os

import pytest

from kapistore.interfaces import DRIVER_AWS, DRIVER_LOCAL, StorageSystem, StoredFile
from kapistore.localstorage import LocalConfig, get_driver


@pytest.fixture
def local_driver(tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    driver = get_driver()
    assert driver.init(LocalConfig(data_path=str(data_dir), file_prefix="")) is True
    return driver


def test_storage_system_is_abstract():
    with pytest.raises(TypeError):
        StorageSystem()


def test_stored_file_is_abstract():
    with pytest.raises(TypeError):
        StoredFile()


def test_local_driver_is_a_storage_system():
    driver = get_driver()
    assert isinstance(driver, StorageSystem)
    assert driver.is_available() is True


def test_local_driver_follows_contract(local_driver, tmp_path):
    source = tmp_path / "upload"
    source.write_bytes(b"content")
    assert local_driver.file_exists("abc") is False
    local_driver.move_to_filesystem(str(source), "abc")
    assert local_driver.file_exists("abc") is True
    stored = local_driver.get_file("abc")
    assert isinstance(stored, StoredFile)
    assert stored.exists() is True
    assert stored.name == "abc"
    assert os.path.exists(tmp_path / "data" / "abc")


def test_driver_names_are_distinct():
    assert get_driver().system_name == DRIVER_LOCAL
    assert DRIVER_LOCAL == "localstorage"
    assert DRIVER_AWS == "awss3"