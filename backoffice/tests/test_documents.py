from io import BytesIO

import pytest
from sqlalchemy.exc import IntegrityError

from backoffice.services.documents import save_document
from backoffice.services.errors import DomainError


def test_entity_type_is_sanitised_for_folder_and_row(db_session, tmp_path):
    doc = save_document(
        db_session,
        BytesIO(b"facture"),
        filename="facture.pdf",
        content_type="application/pdf",
        base_dir=str(tmp_path),
        entity_type="../orders",
        entity_id=7,
    )
    assert doc.entity_type == "orders"
    assert (tmp_path / "orders" / "7" / "facture.pdf").read_bytes() == b"facture"

    with pytest.raises(DomainError):
        save_document(
            db_session,
            BytesIO(b"x"),
            filename="x.pdf",
            content_type=None,
            base_dir=str(tmp_path),
            entity_type="../",
        )


def test_failed_insert_leaves_no_file(db_session, tmp_path):
    with pytest.raises(IntegrityError):
        save_document(
            db_session,
            BytesIO(b"orphelin"),
            filename="orphelin.pdf",
            content_type="application/pdf",
            base_dir=str(tmp_path),
            uploaded_by=999999,
        )
    db_session.rollback()

    assert list(tmp_path.rglob("*.pdf")) == []
