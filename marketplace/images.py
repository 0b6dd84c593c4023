import logging
from urllib.parse import urlparse

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from django.conf import settings

from .exceptions import ImageUploadError

logger = logging.getLogger(__name__)


def qualify_image_ref(ref):
    """Turn a stored image reference into a URL a client can fetch."""
    ref = str(ref).strip()
    if urlparse(ref).scheme in ('http', 'https'):
        return ref
    path = ref.lstrip('/')
    if not path.startswith('uploads/'):
        path = f"uploads/{path}"
    return f"{settings.BACKEND_URL}/{path}"


def qualify_image_refs(refs):
    return [qualify_image_ref(ref) for ref in refs if str(ref).strip()]


def upload_images(files):
    """Push uploaded files to Cloudinary and return their secure URLs, in order."""
    urls = []
    for upload in files:
        try:
            result = cloudinary.uploader.upload(
                upload, folder=settings.CLOUDINARY_UPLOAD_FOLDER, resource_type='image'
            )
        except CloudinaryError as e:
            logger.error("Cloudinary upload failed for %s: %s", getattr(upload, 'name', '?'), e)
            raise ImageUploadError(f"Could not upload {getattr(upload, 'name', 'image')}") from e
        urls.append(result['secure_url'])
    return urls
