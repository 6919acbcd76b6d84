from pathlib import Path
from typing import Generator
import pytest
from unittest.mock import Mock
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient
from faker import Faker

from main import app
from models.base import Base
from models import ContentType
from db.session import get_db
from schemas.field_definition import ContentTypeCreate, FieldDefinitionCreate
from services.content_service import ContentService
from services.content_type_service import ContentTypeService
from services.external_storage_handler import ImageExternalStorageHandler
from services.image_storage_service import LocalImageStorage

fake = Faker()

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={
        "check_same_thread": False,
    },
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Content of the fixture files does not matter, only their size
JPEG_BYTES = bytes.fromhex("ffd8ffe000104a46494600010100000100010000") + b"\x00" * 64 + bytes.fromhex("ffd9")
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 120


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a test database session."""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database session override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def fixture_images(tmp_path: Path) -> dict[str, Path]:
    """Image files to create image values from."""
    directory = tmp_path / "_fixtures"
    directory.mkdir()

    jpg = directory / "image.jpg"
    jpg.write_bytes(JPEG_BYTES)
    png = directory / "image.png"
    png.write_bytes(PNG_BYTES)

    return {"jpg": jpg, "png": png, "missing": directory / "nofile.png"}


@pytest.fixture
def fixture_data(fixture_images: dict[str, Path]) -> dict[str, dict]:
    return {
        "create": {
            "fileName": "Icy-Night-Flower.jpg",
            "inputUri": str(fixture_images["jpg"]),
            "alternativeText": "My icy flower at night",
            "fileSize": len(JPEG_BYTES),
        },
        "update": {
            "fileName": "Blue-Blue-Blue.png",
            "inputUri": str(fixture_images["png"]),
            "alternativeText": "Such a blue …",
            "fileSize": len(PNG_BYTES),
        },
    }


@pytest.fixture
def image_storage(tmp_path: Path) -> LocalImageStorage:
    return LocalImageStorage(root=str(tmp_path / "storage"), prefix="images")


@pytest.fixture
def content_service(db_session: Session, image_storage: LocalImageStorage) -> ContentService:
    return ContentService(
        db_session,
        storage_handlers={
            "ezimage": ImageExternalStorageHandler(db_session, image_storage),
        },
    )


@pytest.fixture
def content_type_service(db_session: Session) -> ContentTypeService:
    return ContentTypeService(db_session)


@pytest.fixture
def make_image_content_type(content_type_service: ContentTypeService):
    """Factory creating a content type with a 'name' text line and a 'data' image field."""
    def factory(
        is_translatable: bool = True,
        validator_configuration: dict | None = None,
        name_validators: dict | None = None,
    ) -> ContentType:
        data = ContentTypeCreate(
            identifier=f"image_{fake.unique.random_int(min=1, max=99999)}",
            main_language_code="eng-US",
            names={"eng-US": "Image"},
            field_definitions=[
                FieldDefinitionCreate(
                    identifier="name",
                    field_type_identifier="ezstring",
                    names={"eng-US": "Name"},
                    is_required=True,
                    validator_configuration=name_validators or {},
                ),
                FieldDefinitionCreate(
                    identifier="data",
                    field_type_identifier="ezimage",
                    names={"eng-US": "Image", "ger-DE": "Bild"},
                    descriptions={"eng-US": "The image file"},
                    is_translatable=is_translatable,
                    validator_configuration=validator_configuration or {
                        "FileSizeValidator": {"maxFileSize": 2 * 1024 * 1024},
                    },
                ),
            ],
        )
        return content_type_service.create_content_type(data)
    return factory


@pytest.fixture
def mock_settings(tmp_path: Path):
    """Mock settings for testing."""
    settings = Mock()
    settings.IMAGE_STORAGE_BACKEND = "local"
    settings.IMAGE_STORAGE_PREFIX = "images"
    settings.LOCAL_STORAGE_ROOT = str(tmp_path / "storage")
    settings.S3_BUCKET_NAME = "test-bucket"
    settings.S3_LOCAL_ENDPOINT = None
    settings.S3_ACCESS_KEY = "test-access-key"
    settings.S3_SECRET_KEY = "test-secret-key"
    settings.AWS_REGION = "eu-central-1"
    settings.FIELD_TYPE_PACKAGES = "field_types"
    return settings
