# tests/test_upload.py
import io
import os
import re

import pytest

from vgosti.config import settings
from vgosti.uploads import CheckedImage, discard_images, generate_filename, safe_extension, write_image

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def test_upload_requires_admin(client):
    response = client.post("/api/upload", files={"image": ("a.png", PNG_BYTES, "image/png")})
    assert response.status_code == 401


def test_upload_stores_file_and_serves_it(client, admin_headers):
    response = client.post("/api/upload", files={"image": ("photo.PNG", PNG_BYTES, "image/png")},
                           headers=admin_headers)
    assert response.status_code == 200
    image_url = response.json()["imageUrl"]
    assert re.fullmatch(r"/uploads/image-\d+-\d+\.png", image_url)

    stored = os.path.join(settings.UPLOAD_DIR, os.path.basename(image_url))
    with open(stored, "rb") as f:
        assert f.read() == PNG_BYTES

    served = client.get(image_url)
    assert served.status_code == 200
    assert served.content == PNG_BYTES


def test_upload_without_file(client, admin_headers):
    response = client.post("/api/upload", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "No file uploaded"


def test_upload_rejects_non_images(client, admin_headers):
    before = set(os.listdir(settings.UPLOAD_DIR)) if os.path.isdir(settings.UPLOAD_DIR) else set()
    response = client.post("/api/upload", files={"image": ("notes.txt", b"hello", "text/plain")},
                           headers=admin_headers)
    assert response.status_code == 415
    assert response.json()["detail"] == "Only image files are allowed!"
    assert set(os.listdir(settings.UPLOAD_DIR)) == before


def test_upload_rejects_oversized_files(client, admin_headers):
    before = set(os.listdir(settings.UPLOAD_DIR))
    big = io.BytesIO(b"\xff" * (settings.MAX_UPLOAD_SIZE + 1))
    response = client.post("/api/upload", files={"image": ("big.jpg", big, "image/jpeg")},
                           headers=admin_headers)
    assert response.status_code == 413
    assert set(os.listdir(settings.UPLOAD_DIR)) == before


@pytest.mark.parametrize("original, expected", [
    ("photo.JPG", ".jpg"),
    ("../../etc/passwd.png", ".png"),
    ("C:\\Users\\me\\pic.webp", ".webp"),
    ("noextension", ""),
    ("weird.p/ng", ""),
    (None, ""),
])
def test_safe_extension(original, expected):
    assert safe_extension(original) == expected


def test_generated_names_do_not_reuse_client_path():
    name = generate_filename("../../secret/evil.gif")
    assert name.startswith("image-")
    assert name.endswith(".gif")
    assert "/" not in name and ".." not in name


def test_generated_names_are_unique():
    names = {generate_filename("a.png") for _ in range(50)}
    assert len(names) == 50


def test_discard_removes_only_local_uploads():
    image_url = write_image(CheckedImage("a.png", PNG_BYTES))
    stored = os.path.join(settings.UPLOAD_DIR, os.path.basename(image_url))
    assert os.path.exists(stored)

    discard_images(["https://example.com/a.png", image_url])
    assert not os.path.exists(stored)
    discard_images([image_url])
