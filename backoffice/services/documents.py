from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import BinaryIO

from sqlalchemy.orm import Session
from werkzeug.utils import secure_filename

from backoffice.app.db.models.models_v1 import Document
from backoffice.services.errors import DomainError, NotFoundError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def _unique_path(folder: Path, filename: str) -> Path:
    path = folder / filename
    counter = 1
    while path.exists():
        path = folder / f"{Path(filename).stem}-{counter}{Path(filename).suffix}"
        counter += 1
    return path


def save_document(
    db: Session,
    stream: BinaryIO,
    *,
    filename: str | None,
    content_type: str | None,
    base_dir: str,
    entity_type: str = "general",
    entity_id: int | None = None,
    uploaded_by: int | None = None,
) -> Document:
    """
    Stocke le fichier sous <base_dir>/<entity_type>/<entity_id|general>/<nom>.
    Le nom est assaini ; un suffixe -N évite d'écraser un fichier existant.
    """
    original_name = filename or "document"
    safe_name = secure_filename(original_name)
    if not safe_name:
        raise DomainError("Invalid filename")

    entity_type = secure_filename(entity_type)
    if not entity_type:
        raise DomainError("Invalid entity_type")

    folder = Path(base_dir) / entity_type / (str(entity_id) if entity_id is not None else "general")
    folder.mkdir(parents=True, exist_ok=True)
    path = _unique_path(folder, safe_name)

    h = hashlib.sha256()
    size = 0
    try:
        with path.open("wb") as out:
            while True:
                chunk = stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                h.update(chunk)
                size += len(chunk)
                out.write(chunk)

        doc = Document(
            filename=original_name,
            stored_path=str(path),
            content_type=content_type,
            size=size,
            sha256=h.hexdigest(),
            entity_type=entity_type,
            entity_id=entity_id,
            uploaded_by=uploaded_by,
        )
        db.add(doc)
        db.flush()
    except Exception:
        # pas de fichier orphelin sans ligne en base
        path.unlink(missing_ok=True)
        raise

    logger.info("Saved document %s (%s bytes, sha256=%s) for %s/%s", path, size, doc.sha256, entity_type, entity_id)
    return doc


def document_path(doc: Document) -> Path:
    path = Path(doc.stored_path)
    if not path.is_file():
        raise NotFoundError("Document file missing")
    return path


def delete_document(db: Session, doc: Document) -> None:
    path = Path(doc.stored_path)
    if path.is_file():
        path.unlink()
    else:
        logger.warning("Document %s had no file on disk (%s)", doc.id, path)
    db.delete(doc)
