"""Shared test fixtures for the imageup test suite."""
import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image

from imageup import storage
from tests.settings import build_storages
from tests.utils import image_bytes


@pytest.fixture(autouse=True)
def disks(settings, tmp_path):
    """Fresh storage directories for every test."""
    settings.STORAGES = build_storages(tmp_path)
    return tmp_path


@pytest.fixture
def public_disk(disks):
    return storage.get_disk('public')


@pytest.fixture
def local_disk(disks):
    return storage.get_disk('local')


@pytest.fixture
def make_image():
    """Factory for in-memory image uploads."""
    def factory(name='avatar.jpg', width=10, height=10, format='JPEG', content_type='image/jpeg'):
        return SimpleUploadedFile(name, image_bytes(width, height, format), content_type=content_type)
    return factory


@pytest.fixture
def make_file():
    """Factory for in-memory non-image uploads."""
    def factory(name='document.pdf', content=b'%PDF-1.4 test document', content_type='application/pdf'):
        return SimpleUploadedFile(name, content, content_type=content_type)
    return factory


@pytest.fixture
def stored_size():
    """Dimensions of an image stored on a disk."""
    def reader(disk, path):
        with Image.open(storage.physical_path(disk, path)) as img:
            return img.size
    return reader
