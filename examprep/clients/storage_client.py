import logging
from typing import Optional
from urllib.parse import quote
import requests
from examprep.config import config
from examprep.exceptions import StorageError

logger = logging.getLogger(__name__)


class StorageClient:
    """Downloads objects from the storage REST API with a service key"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        service_key: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or config.STORAGE_URL or "").rstrip("/")
        self.service_key = service_key or config.STORAGE_SERVICE_KEY
        self.timeout = timeout or config.STORAGE_TIMEOUT
        self.session = session or requests.Session()

    def object_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/{quote(bucket)}/{quote(path.lstrip('/'))}"

    def download(self, bucket: str, path: str) -> bytes:
        """
        Download an object as bytes

        Raises:
            StorageError: On a missing path, transport error, non-2xx status or empty body
        """
        if not path:
            raise StorageError(f"No file path recorded for bucket '{bucket}'")
        if not self.base_url or not self.service_key:
            raise StorageError("Object storage is not configured")

        url = self.object_url(bucket, path)
        logger.info("Downloading %s/%s", bucket, path)
        try:
            response = self.session.get(
                url,
                headers={
                    "Authorization": f"Bearer {self.service_key}",
                    "apikey": self.service_key,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise StorageError(f"Download of {bucket}/{path} failed: {e}") from e

        if not response.content:
            raise StorageError(f"Download of {bucket}/{path} returned no data")

        logger.info("Downloaded %s/%s (%d bytes)", bucket, path, len(response.content))
        return response.content
