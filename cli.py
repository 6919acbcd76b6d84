import json
import uuid
from pathlib import Path
from typing import Optional

import typer
from typer import Argument, Option

from core.logging_config import LogContext, setup_logging
from schemas.field_definition import ContentTypeCreate

app = typer.Typer()


def _parse_fields(assignments: list[str]) -> dict[str, str]:
    fields = {}
    for assignment in assignments:
        identifier, separator, value = assignment.partition("=")
        if not separator:
            raise typer.BadParameter(f"Expected identifier=value, got '{assignment}'")
        fields[identifier.strip()] = value
    return fields


def _dump_version(content_service, version) -> dict:
    values = {}
    for field in version.fields:
        value = content_service.load_field_value(version, field.field_definition_identifier, field.language_code)
        field_type = content_service.field_type_loader.build(field.field_type_identifier)
        values.setdefault(field.language_code, {})[field.field_definition_identifier] = field_type.to_hash(value)

    return {
        "content_id": str(version.content_id),
        "version_no": version.version_no,
        "status": version.status.value,
        "fields": values,
    }


@app.command()
def init_db():
    """Create the database schema"""
    from db.session import init_db as create_schema

    create_schema()
    typer.echo("Database schema created")


@app.command()
def create_content_type(definition_file: Path = Argument(..., exists=True, dir_okay=False)):
    """Create a content type from a JSON definition file"""
    from db.session import db_context
    from services.content_type_service import get_content_type_service

    data = ContentTypeCreate.model_validate_json(definition_file.read_text())

    with db_context() as db:
        content_type = get_content_type_service(db).create_content_type(data)
        typer.echo(f"Created content type '{content_type.identifier}' ({content_type.id})")


@app.command()
def create_content(
    content_type: str = Option(..., "--content-type"),
    field: list[str] = Option([], "--field", help="identifier=value, images take a file path"),
    language: Optional[str] = Option(None, "--language"),
    publish: bool = Option(False, "--publish"),
):
    """Create content, optionally publishing the first version"""
    from db.session import db_context
    from services.content_service import get_content_service
    from services.content_type_service import get_content_type_service

    with db_context() as db:
        content_service = get_content_service(db)
        version = content_service.create_content(
            get_content_type_service(db).load_content_type(content_type),
            _parse_fields(field),
            language,
        )
        if publish:
            version = content_service.publish_version(version)
        typer.echo(json.dumps(_dump_version(content_service, version), indent=2))


@app.command()
def show_content(
    content_id: str = Argument(...),
    version_no: Optional[int] = Option(None, "--version"),
):
    """Print the field values of a content version as hashes"""
    from db.session import db_context
    from services.content_service import get_content_service

    with LogContext(content_id=content_id, version_no=version_no), db_context() as db:
        content_service = get_content_service(db)
        content = content_service.load_content(uuid.UUID(content_id))
        version = content_service.load_version(content, version_no)
        typer.echo(json.dumps(_dump_version(content_service, version), indent=2))


@app.command()
def delete_content(content_id: str = Argument(...)):
    """Delete content with all versions and their stored files"""
    from db.session import db_context
    from services.content_service import get_content_service

    with LogContext(content_id=content_id), db_context() as db:
        content_service = get_content_service(db)
        content_service.delete_content(content_service.load_content(uuid.UUID(content_id)))
        typer.echo(f"Deleted content {content_id}")


@app.callback()
def main(log_level: str = Option("WARNING", "--log-level")):
    setup_logging(log_level=log_level.upper())


if __name__ == "__main__":
    app()
