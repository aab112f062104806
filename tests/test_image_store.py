"""
Image storage and file handling tests.

Covers:
- Filename sanitization and unique names
- Extension, MIME type and size checks
- Storing and discarding images under the upload directory
"""

import pytest

from outpass.core.exceptions import ValidationError
from outpass.services import ImageStore, ImageUpload
from outpass.utils.file_handler import (
    FileHandlerError,
    file_extension,
    generate_unique_filename,
    safe_filename,
    validate_file_size,
    validate_image_mime_type,
)

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32


@pytest.fixture
def store(tmp_path):
    return ImageStore(upload_dir=tmp_path / "images", max_size=1024)


class TestFileHandler:

    @pytest.mark.parametrize("raw, expected", [
        ("photo.png", "photo.png"),
        ("my photo.JPG", "my_photo.JPG"),
        ("../../etc/passwd.png", "passwd.png"),
        ("..\\windows\\evil.gif", "evil.gif"),
        ("pic$%^.jpeg", "pic.jpeg"),
    ])
    def test_safe_filename(self, raw, expected):
        assert safe_filename(raw) == expected

    def test_safe_filename_rejects_empty(self):
        with pytest.raises(FileHandlerError):
            safe_filename("$$$")

    def test_unique_names_differ(self):
        first = generate_unique_filename("a.PNG", prefix="image")
        second = generate_unique_filename("a.PNG", prefix="image")

        assert first != second
        assert first.startswith("image_a_")
        assert first.endswith(".png")

    def test_extension_and_mime(self):
        assert file_extension("x.JPeG") == "jpeg"
        assert validate_image_mime_type("x.jpg", "image/jpeg")
        assert not validate_image_mime_type("x.jpg", "image/png")
        assert not validate_image_mime_type("x.png", None)

    def test_size_bounds(self):
        assert validate_file_size(1, 10)
        assert validate_file_size(10, 10)
        assert not validate_file_size(0, 10)
        assert not validate_file_size(11, 10)


class TestImageStore:

    def test_store_and_discard(self, store):
        reference = store.store_upload(ImageUpload(JPEG_BYTES, "face.jpg", "image/jpeg"))

        path = store.path_for(reference)
        assert path.read_bytes() == JPEG_BYTES
        assert reference.startswith("image_face_")

        store.discard(reference)
        assert not path.exists()
        store.discard(reference)

    @pytest.mark.parametrize("filename, content_type", [
        ("notes.txt", "text/plain"),
        ("face.jpg", "image/png"),
        ("face.jpg", None),
        ("", "image/jpeg"),
    ])
    def test_rejects_non_images(self, store, filename, content_type):
        with pytest.raises(ValidationError) as exc_info:
            store.store_image(JPEG_BYTES, filename, content_type)
        assert exc_info.value.field == "image"

    def test_rejects_oversized(self, store):
        with pytest.raises(ValidationError) as exc_info:
            store.store_image(b"\x00" * 2048, "big.png", "image/png")
        assert exc_info.value.message == "Image must be between 1 and 1024 bytes"

    def test_rejects_empty(self, store):
        with pytest.raises(ValidationError):
            store.store_image(b"", "empty.gif", "image/gif")
