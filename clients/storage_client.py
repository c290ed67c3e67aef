"""Google Cloud Storage client for direct-to-bucket video uploads."""

import json
import logging
from datetime import timedelta
from typing import Optional, Union

import requests
from google.cloud import storage
from google.oauth2 import service_account

from .errors import CredentialsError

logger = logging.getLogger(__name__)


class StorageClient:
    """Issues short-lived signed URLs so browsers upload straight to GCS."""

    DEFAULT_BUCKET = "my-playbyplay-videos"

    # Signed URLs expire after 10 minutes
    SIGNED_URL_TTL = timedelta(minutes=10)

    def __init__(
        self,
        bucket_name: Optional[str] = None,
        service_account_key: Optional[Union[str, dict]] = None,
        client: Optional[storage.Client] = None,
    ):
        self.bucket_name = bucket_name or self.DEFAULT_BUCKET
        self.service_account_key = service_account_key
        self._client = client

    def _service_account_info(self) -> dict:
        key = self.service_account_key
        if not key:
            raise CredentialsError("GCP_SERVICE_ACCOUNT_KEY not set")
        if isinstance(key, dict):
            return key
        try:
            return json.loads(key)
        except json.JSONDecodeError as e:
            raise CredentialsError("GCP_SERVICE_ACCOUNT_KEY is not valid JSON") from e

    @property
    def client(self) -> storage.Client:
        """Get the Storage client."""
        if self._client is None:
            info = self._service_account_info()
            credentials = service_account.Credentials.from_service_account_info(info)
            self._client = storage.Client(project=info.get("project_id"), credentials=credentials)
        return self._client

    def create_upload_url(self, filename: str, content_type: str) -> str:
        """Create a V4 signed URL that allows a single PUT of *filename*.

        Args:
            filename: Object name inside the bucket
            content_type: MIME type the uploader must send

        Returns:
            Signed URL valid for ``SIGNED_URL_TTL``
        """
        if not filename or not content_type:
            raise ValueError("Missing filename or contentType")

        blob = self.client.bucket(self.bucket_name).blob(filename)
        url = blob.generate_signed_url(
            version="v4",
            expiration=self.SIGNED_URL_TTL,
            method="PUT",
            content_type=content_type,
        )
        logger.info("Issued upload URL for gs://%s/%s", self.bucket_name, filename)
        return url

    def upload_via_signed_url(self, url: str, data: bytes, content_type: str) -> None:
        """PUT *data* to a signed URL (what the browser does after asking for one)."""
        response = requests.put(url, data=data, headers={"Content-Type": content_type}, timeout=(10, 300))
        response.raise_for_status()

    def download(self, filename: str) -> bytes:
        """Fetch an uploaded object's bytes."""
        return self.client.bucket(self.bucket_name).blob(filename).download_as_bytes()
