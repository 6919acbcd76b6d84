"""Image storage - binary payloads of image values on the filesystem or S3"""

import mimetypes
import os
import shutil
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from core.exceptions import StorageError
from core.logging_config import get_logger
from core.settings import settings
from field_types.image import ImageValue

logger = get_logger(__name__)


class ImageStorage(ABC):
    """
    Stores the file behind an image value.

    Implementations raise StorageError when an operation fails. Failures are
    not retried.
    """

    def __init__(self, prefix: str):
        self.prefix = prefix.strip("/")

    def generate_storage_path(self, file_name: str) -> str:
        return f"{self.prefix}/{uuid.uuid4().hex}/{file_name}"

    def store(self, value: ImageValue, storage_path: Optional[str] = None) -> ImageValue:
        """Store value.input_uri, returning the value with id and uri assigned"""
        if value.input_uri is None:
            raise StorageError(value.uri, "value has no input file to store")

        storage_path = storage_path or self.generate_storage_path(value.file_name or Path(value.input_uri).name)
        uri = self._write(value.input_uri, storage_path)
        logger.info_ctx("Stored image", path=storage_path, uri=uri, source=value.input_uri)

        return value.model_copy(update={
            "id": storage_path,
            "uri": uri,
            "input_uri": None,
        })

    def copy_for_translation(self, value: ImageValue) -> ImageValue:
        """
        Value for the same image in another language.

        The copy shares the stored file, ownership is tracked per field by the
        storage handler.
        """
        return value.model_copy(update={"input_uri": None})

    @abstractmethod
    def _write(self, source: str, storage_path: str) -> str:
        """Write the source file and return its public uri"""

    @abstractmethod
    def exists(self, uri: str) -> bool:
        ...

    @abstractmethod
    def remove(self, uri: str) -> None:
        ...


class LocalImageStorage(ImageStorage):
    """Stores images below a directory, uris are root-relative: /{storage path}"""

    def __init__(self, root: str, prefix: str):
        super().__init__(prefix)
        self.root = Path(root)

    def _full_path(self, uri: str) -> Path:
        relative = uri.lstrip("/")
        full_path = (self.root / relative).resolve()
        if self.root.resolve() not in full_path.parents:
            raise StorageError(uri, "uri points outside of the storage root")
        return full_path

    def _write(self, source: str, storage_path: str) -> str:
        uri = f"/{storage_path}"
        target = self._full_path(uri)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
        except OSError as e:
            raise StorageError(uri, str(e)) from e
        return uri

    def exists(self, uri: str) -> bool:
        return self._full_path(uri).is_file()

    def remove(self, uri: str) -> None:
        try:
            self._full_path(uri).unlink()
        except OSError as e:
            raise StorageError(uri, str(e)) from e
        logger.info_ctx("Removed image", uri=uri)


class S3ImageStorage(ImageStorage):
    """Stores images in an S3 (or S3 compatible) bucket"""

    def __init__(self, bucket_name: str, prefix: str, region: str, s3_client=None, endpoint: Optional[str] = None):
        super().__init__(prefix)
        self.bucket_name = bucket_name
        self.region = region
        self.endpoint = endpoint.rstrip("/") if endpoint else None
        self.s3_client = s3_client or self._create_s3_client()

    def _create_s3_client(self):
        """Create S3 client with appropriate credentials"""
        is_lambda = os.getenv("AWS_EXECUTION_ENV") is not None

        if is_lambda:
            # In Lambda, use IAM role
            return boto3.client('s3', region_name=self.region)

        return boto3.client(
            's3',
            endpoint_url=self.endpoint,
            aws_access_key_id=settings.S3_ACCESS_KEY,
            aws_secret_access_key=settings.S3_SECRET_KEY,
            region_name=self.region
        )

    @property
    def base_url(self) -> str:
        if self.endpoint:
            return f"{self.endpoint}/{self.bucket_name}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com"

    def _key_from_uri(self, uri: str) -> str:
        if uri.startswith(self.base_url + "/"):
            return uri[len(self.base_url) + 1:]
        return uri.lstrip("/")

    def _write(self, source: str, storage_path: str) -> str:
        content_type, _ = mimetypes.guess_type(storage_path)
        try:
            self.s3_client.upload_file(
                source,
                self.bucket_name,
                storage_path,
                ExtraArgs={'ContentType': content_type or 'application/octet-stream'}
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(storage_path, str(e)) from e
        return f"{self.base_url}/{storage_path}"

    def exists(self, uri: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=self._key_from_uri(uri))
            return True
        except ClientError as e:
            error_code = e.response['Error']['Code']
            if error_code in ('404', 'NoSuchKey', 'NotFound'):
                return False
            raise StorageError(uri, str(e)) from e

    def remove(self, uri: str) -> None:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=self._key_from_uri(uri))
        except (ClientError, BotoCoreError) as e:
            raise StorageError(uri, str(e)) from e
        logger.info_ctx("Removed image", uri=uri, bucket=self.bucket_name)


def get_image_storage() -> ImageStorage:
    """Image storage for the configured backend"""
    if settings.IMAGE_STORAGE_BACKEND == "s3":
        return S3ImageStorage(
            bucket_name=settings.S3_BUCKET_NAME,
            prefix=settings.IMAGE_STORAGE_PREFIX,
            region=settings.AWS_REGION,
            endpoint=settings.S3_LOCAL_ENDPOINT,
        )
    if settings.IMAGE_STORAGE_BACKEND == "local":
        return LocalImageStorage(
            root=settings.LOCAL_STORAGE_ROOT,
            prefix=settings.IMAGE_STORAGE_PREFIX,
        )
    raise ValueError(f"Unknown image storage backend '{settings.IMAGE_STORAGE_BACKEND}'")
