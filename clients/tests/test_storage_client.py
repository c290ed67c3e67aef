"""Tests for clients.storage_client — signed upload URLs."""

import json
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest

from clients.errors import CredentialsError
from clients.storage_client import StorageClient


SERVICE_ACCOUNT = {"type": "service_account", "project_id": "playbyplay-demo", "client_email": "x@y"}


class TestCreateUploadUrl:
    def test_signed_put_url(self):
        gcs = MagicMock()
        blob = gcs.bucket.return_value.blob.return_value
        blob.generate_signed_url.return_value = "https://storage.googleapis.com/signed"

        client = StorageClient(bucket_name="videos", client=gcs)
        url = client.create_upload_url("clip.mp4", "video/mp4")

        assert url == "https://storage.googleapis.com/signed"
        gcs.bucket.assert_called_once_with("videos")
        gcs.bucket.return_value.blob.assert_called_once_with("clip.mp4")
        blob.generate_signed_url.assert_called_once_with(
            version="v4",
            expiration=timedelta(minutes=10),
            method="PUT",
            content_type="video/mp4",
        )

    @pytest.mark.parametrize("filename,content_type", [("", "video/mp4"), ("clip.mp4", ""), (None, None)])
    def test_missing_fields(self, filename, content_type):
        client = StorageClient(client=MagicMock())
        with pytest.raises(ValueError, match="Missing filename or contentType"):
            client.create_upload_url(filename, content_type)


class TestCredentials:
    def test_missing_key(self, monkeypatch):
        monkeypatch.setenv("GCP_SERVICE_ACCOUNT_KEY", json.dumps(SERVICE_ACCOUNT))
        with pytest.raises(CredentialsError):
            StorageClient().client

    def test_invalid_json_key(self):
        with pytest.raises(CredentialsError):
            StorageClient(service_account_key="{not json").client

    def test_client_built_from_key(self):
        with patch("clients.storage_client.service_account.Credentials.from_service_account_info") as creds, \
                patch("clients.storage_client.storage.Client") as gcs_cls:
            client = StorageClient(service_account_key=json.dumps(SERVICE_ACCOUNT))
            assert client.client is gcs_cls.return_value
            # Built once
            assert client.client is gcs_cls.return_value

        creds.assert_called_once_with(SERVICE_ACCOUNT)
        gcs_cls.assert_called_once_with(project="playbyplay-demo", credentials=creds.return_value)

    def test_default_bucket(self, monkeypatch):
        monkeypatch.setenv("GCS_BUCKET_NAME", "ambient-bucket")
        assert StorageClient().bucket_name == StorageClient.DEFAULT_BUCKET


class TestTransfers:
    def test_upload_via_signed_url(self):
        with patch("clients.storage_client.requests.put") as put:
            StorageClient(client=MagicMock()).upload_via_signed_url("https://signed", b"data", "video/mp4")

        put.assert_called_once()
        args, kwargs = put.call_args
        assert args == ("https://signed",)
        assert kwargs["data"] == b"data"
        assert kwargs["headers"] == {"Content-Type": "video/mp4"}
        put.return_value.raise_for_status.assert_called_once()

    def test_download(self):
        gcs = MagicMock()
        gcs.bucket.return_value.blob.return_value.download_as_bytes.return_value = b"video"
        assert StorageClient(bucket_name="videos", client=gcs).download("clip.mp4") == b"video"
