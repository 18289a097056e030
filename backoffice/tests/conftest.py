import os
import tempfile
from datetime import date
from decimal import Decimal

# Avant tout import backoffice : get_settings() est mis en cache au premier appel
_TMP = tempfile.mkdtemp(prefix="backoffice-tests-")
os.environ["DATABASE_URL"] = "sqlite+pysqlite://"
os.environ["LOG_DIR"] = os.path.join(_TMP, "logs")
os.environ["DOCUMENTS_DIR"] = os.path.join(_TMP, "documents")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from backoffice.app.api.deps import get_db
from backoffice.app.db.base import Base
from backoffice.app.db.models.core_types import ContainerStatus, ContainerType, Role
from backoffice.app.db.models.models_v1 import (
    Container,
    Groupage,
    Order,
    Product,
    Supplier,
    Transitaire,
    User,
)
from backoffice.app.db.session import SessionLocal
from backoffice.app.main import app
from backoffice.services.orders import add_order_line, start_workflow

engine = create_engine(
    "sqlite+pysqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# pysqlite : SAVEPOINT fiables seulement si on émet BEGIN nous-mêmes
@event.listens_for(engine, "connect")
def _sqlite_connect(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@event.listens_for(engine, "begin")
def _sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN")


Base.metadata.create_all(bind=engine)


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Session DB isolée par test.

    Utilise une transaction englobante + SAVEPOINT.
    TOUT est rollback à la fin du test, même après commit().
    """
    connection = engine.connect()
    transaction = connection.begin()

    session = SessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture()
def client(db_session):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


# ---------- Fabriques ----------
@pytest.fixture()
def make_transitaire(db_session):
    counter = iter(range(1, 1000))

    def _make(**kwargs):
        n = next(counter)
        t = Transitaire(name=kwargs.pop("name", f"Transitaire {n}"), **kwargs)
        db_session.add(t)
        db_session.flush()
        return t

    return _make


@pytest.fixture()
def supplier(db_session):
    s = Supplier(name="ACME Trading", country="China")
    db_session.add(s)
    db_session.flush()
    return s


@pytest.fixture()
def make_product(db_session):
    counter = iter(range(1, 1000))

    def _make(**kwargs):
        n = next(counter)
        kwargs.setdefault("sku", f"SKU-{n:03d}")
        kwargs.setdefault("name", f"Produit {n}")
        p = Product(**kwargs)
        db_session.add(p)
        db_session.flush()
        return p

    return _make


@pytest.fixture()
def make_order(db_session, supplier):
    counter = iter(range(1, 1000))

    def _make(transitaire=None, lines=(), **kwargs):
        order = Order(
            order_number=f"CMD-TEST-{next(counter):04d}",
            supplier_id=supplier.id,
            transitaire_id=transitaire.id if transitaire else None,
            order_date=kwargs.pop("order_date", date.today()),
            **kwargs,
        )
        db_session.add(order)
        db_session.flush()
        for product, quantity, unit_price in lines:
            add_order_line(db_session, order, product, quantity=quantity, unit_price=Decimal(str(unit_price)))
        start_workflow(db_session, order)
        return order

    return _make


@pytest.fixture()
def make_container(db_session):
    counter = iter(range(1, 1000))

    def _make(transitaire, **kwargs):
        kwargs.setdefault("type", ContainerType.feet_40)
        kwargs.setdefault("status", ContainerStatus.planning)
        c = Container(number=f"MSCU{next(counter):07d}", transitaire_id=transitaire.id, **kwargs)
        db_session.add(c)
        db_session.flush()
        return c

    return _make


@pytest.fixture()
def make_groupage(db_session, make_container):
    def _make(transitaire, pallets=10, weight="10000", volume="30", **kwargs):
        container = make_container(transitaire, type=ContainerType.groupage)
        g = Groupage(
            container_id=container.id,
            transitaire_id=transitaire.id,
            status=kwargs.pop("status", ContainerStatus.available),
            max_space_pallets=pallets,
            max_weight=Decimal(weight),
            max_volume=Decimal(volume),
            available_space_pallets=pallets,
            available_weight=Decimal(weight),
            available_volume=Decimal(volume),
            **kwargs,
        )
        db_session.add(g)
        db_session.flush()
        return g

    return _make


@pytest.fixture()
def admin(db_session):
    u = User(email="admin@test.local", full_name="Admin", role=Role.admin)
    db_session.add(u)
    db_session.flush()
    return u
