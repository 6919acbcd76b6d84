from models.content_type import ContentType, FieldDefinitionRecord
from models.content import Content, ContentVersion, ContentField, VersionStatus
from models.image_file import ImageFileReference
from models.role import Role, Policy
