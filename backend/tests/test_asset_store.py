"""Unit tests for the Cloudinary wrapper."""

import cloudinary.exceptions
import cloudinary.uploader
import pytest

from utils.cloudinary import delete_image, upload_image
from utils.errors import AssetStoreFailure


@pytest.mark.unit
class TestUploadImage:

    def test_returns_secure_url_and_public_id(self, monkeypatch):
        seen = {}

        def fake_upload(file, **kwargs):
            seen.update(kwargs)
            return {"secure_url": "https://res.cloudinary.com/demo/mug.png", "public_id": "shop/mug"}

        monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)

        asset = upload_image(b"bytes", "shopfront/products/abc")

        assert asset == {"url": "https://res.cloudinary.com/demo/mug.png", "public_id": "shop/mug"}
        assert seen["folder"] == "shopfront/products/abc"
        assert seen["resource_type"] == "image"

    def test_sdk_error_becomes_asset_store_failure(self, monkeypatch):
        def broken_upload(file, **kwargs):
            raise cloudinary.exceptions.Error("bad credentials")

        monkeypatch.setattr(cloudinary.uploader, "upload", broken_upload)

        with pytest.raises(AssetStoreFailure):
            upload_image(b"bytes", "shopfront/products/abc")

    @pytest.mark.parametrize("result", [{}, None, {"public_id": "shop/mug"}])
    def test_response_without_url_is_asset_store_failure(self, monkeypatch, result):
        monkeypatch.setattr(cloudinary.uploader, "upload", lambda file, **kwargs: result)

        with pytest.raises(AssetStoreFailure):
            upload_image(b"bytes", "shopfront/products/abc")


@pytest.mark.unit
class TestDeleteImage:

    def test_destroys_by_public_id(self, monkeypatch):
        destroyed = []
        monkeypatch.setattr(
            cloudinary.uploader,
            "destroy",
            lambda public_id, **kwargs: destroyed.append(public_id),
        )

        delete_image("shop/mug")

        assert destroyed == ["shop/mug"]

    def test_missing_public_id_is_skipped(self, monkeypatch):
        destroyed = []
        monkeypatch.setattr(
            cloudinary.uploader,
            "destroy",
            lambda public_id, **kwargs: destroyed.append(public_id),
        )

        delete_image(None)

        assert destroyed == []

    def test_sdk_error_is_logged_not_raised(self, monkeypatch):
        def broken_destroy(public_id, **kwargs):
            raise cloudinary.exceptions.Error("gone")

        monkeypatch.setattr(cloudinary.uploader, "destroy", broken_destroy)

        delete_image("shop/mug")
