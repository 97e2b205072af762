import logging

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

from config.env import (
    CLOUDINARY_CLOUD_NAME,
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
)
from utils.errors import AssetStoreFailure

logger = logging.getLogger(__name__)

cloudinary.config(
    cloud_name=CLOUDINARY_CLOUD_NAME,
    api_key=CLOUDINARY_API_KEY,
    api_secret=CLOUDINARY_API_SECRET,
    secure=True,
)


def upload_image(file, folder: str) -> dict:
    """
    Upload one image and return {"url", "public_id"}.
    Any SDK error or a response without a secure_url is an AssetStoreFailure.
    """
    try:
        result = cloudinary.uploader.upload(
            file,
            folder=folder,
            resource_type="image",
        )
    except cloudinary.exceptions.Error as e:
        logger.warning("IMAGE_UPLOAD_FAILED folder=%s error=%s", folder, e)
        raise AssetStoreFailure("image upload failed") from e

    url = (result or {}).get("secure_url")
    if not url:
        raise AssetStoreFailure("image upload returned no url")

    return {"url": url, "public_id": result.get("public_id")}


def delete_image(public_id: str | None) -> None:
    if not public_id:
        return
    try:
        cloudinary.uploader.destroy(public_id, resource_type="image")
    except cloudinary.exceptions.Error:
        logger.exception("IMAGE_DELETE_FAILED public_id=%s", public_id)
