"""Read-time projection of stored product image names into URLs.

Products store either a bare file name (uploaded through the media pipeline)
or an absolute URL. Serializers call these helpers; nothing here touches the
model instance.
"""

from typing import List, Optional
from urllib.parse import urljoin

from django.conf import settings


def _is_absolute(value: str) -> bool:
    return value.startswith(("http://", "https://", "//"))


def image_url(value: str, request=None) -> Optional[str]:
    if not value:
        return None
    if _is_absolute(value):
        return value
    base = getattr(settings, "PRODUCT_MEDIA_URL", "/media/products/")
    if not base.endswith("/"):
        base += "/"
    url = urljoin(base, value.lstrip("/"))
    if request is not None and not _is_absolute(url):
        return request.build_absolute_uri(url)
    return url


def image_urls(values, request=None) -> List[str]:
    return [url for url in (image_url(v, request) for v in values or []) if url]
