import httpx
import pytest

from restaurant_admin.core.config import Settings
from restaurant_admin.services.images import (
    CloudinaryImageHost,
    ImageUploadError,
    MockImageHost,
    is_remote_reference,
)
from restaurant_admin.services.images.base import guess_content_type, local_path

HOSTED = "https://res.cloudinary.com/demo/image/upload/v1/products/tea.png"


@pytest.fixture
def cloud_settings():
    return Settings(
        env_mode="production",
        cloudinary_cloud_name="demo",
        cloudinary_upload_preset="preset-x",
        _env_file=None,
    )


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "tea.png"
    path.write_bytes(b"\x89PNG fake image")
    return path


def make_host(settings, handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CloudinaryImageHost(settings, client=client)


def test_reference_helpers(tmp_path):
    assert is_remote_reference(HOSTED)
    assert is_remote_reference("http://example.com/a.jpg")
    assert not is_remote_reference("file:///tmp/a.jpg")
    assert not is_remote_reference("/tmp/a.jpg")

    assert str(local_path("file:///tmp/my%20pizza.jpg")) == "/tmp/my pizza.jpg"
    assert local_path(str(tmp_path / "a.jpg")) == tmp_path / "a.jpg"

    assert guess_content_type("a.png") == "image/png"
    assert guess_content_type("a.webp") == "image/webp"
    assert guess_content_type("a.heic") == "image/jpeg"
    assert guess_content_type("noextension") == "image/jpeg"


class TestCloudinary:

    def test_requires_configuration(self):
        with pytest.raises(ValueError):
            CloudinaryImageHost(Settings(env_mode="production", _env_file=None))

    async def test_uploads_local_file(self, cloud_settings, image_file):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"secure_url": HOSTED, "public_id": "products/tea"})

        host = make_host(cloud_settings, handler)
        url = await host.upload(image_file.as_uri(), folder="products")

        assert url == HOSTED
        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.cloudinary.com/v1_1/demo/image/upload"
        body = request.content
        assert b'name="upload_preset"' in body and b"preset-x" in body
        assert b'name="folder"' in body and b"products" in body
        assert b'filename="tea.png"' in body
        assert b"image/png" in body

    async def test_remote_reference_is_not_uploaded(self, cloud_settings):
        def handler(request):
            raise AssertionError("no request expected")

        host = make_host(cloud_settings, handler)
        assert await host.upload(HOSTED, folder="products") == HOSTED

    async def test_empty_reference(self, cloud_settings):
        host = make_host(cloud_settings, lambda request: httpx.Response(200))
        with pytest.raises(ImageUploadError):
            await host.upload("")

    async def test_missing_file(self, cloud_settings, tmp_path):
        host = make_host(cloud_settings, lambda request: httpx.Response(200, json={"secure_url": HOSTED}))
        with pytest.raises(ImageUploadError):
            await host.upload(str(tmp_path / "missing.jpg"))

    async def test_rejected_upload(self, cloud_settings, image_file):
        host = make_host(
            cloud_settings,
            lambda request: httpx.Response(400, json={"error": {"message": "Upload preset not found"}}),
        )
        with pytest.raises(ImageUploadError, match="400"):
            await host.upload(str(image_file))

    async def test_response_without_secure_url(self, cloud_settings, image_file):
        host = make_host(cloud_settings, lambda request: httpx.Response(200, json={"public_id": "x"}))
        with pytest.raises(ImageUploadError, match="secure_url"):
            await host.upload(str(image_file))

    async def test_response_not_json(self, cloud_settings, image_file):
        host = make_host(cloud_settings, lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(ImageUploadError):
            await host.upload(str(image_file))

    async def test_timeout(self, cloud_settings, image_file):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        host = make_host(cloud_settings, handler)
        with pytest.raises(ImageUploadError, match="timed out"):
            await host.upload(str(image_file))

    async def test_transport_error(self, cloud_settings, image_file):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        host = make_host(cloud_settings, handler)
        with pytest.raises(ImageUploadError):
            await host.upload(str(image_file))


class TestMockHost:

    async def test_records_uploads(self):
        host = MockImageHost()
        url = await host.upload("file:///tmp/pizza.jpg", folder="products")

        assert url.startswith("https://res.cloudinary.com/mock/image/upload/products/")
        assert url.endswith(".jpg")
        assert host.uploads[0][1] == "products"

    async def test_passes_remote_urls_through(self):
        host = MockImageHost()
        assert await host.upload(HOSTED) == HOSTED
        assert host.uploads == []

    async def test_failure_rate(self):
        with pytest.raises(ImageUploadError):
            await MockImageHost(failure_rate=1.0).upload("/tmp/pizza.jpg")
