"""
tests/conftest.py

Shared fixtures: a file-backed SQLite database with SAVEPOINT support, a
seeding helper for the asset/partner/deal graph, and a stand-in for
``requests.Session`` so page fetches never leave the process.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import pytest
import requests
from sqlalchemy import create_engine, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

import db.models  # noqa: F401  registers models on Base.metadata
from app.config import DealScanSettings
from app.scanning.engine import DealScanEngine
from app.scanning.fetcher import PageFetcher
from app.services.deal_lifecycle_service import DealLifecycleService
from app.services.deal_scan_service import DealScanService
from app.services.position_locks import PositionLockRegistry
from app.services.scan_confirmation_service import ScanConfirmationService
from db.base import Base
from db.models.asset import Asset, Page, Position
from db.models.audit_log import AuditLog
from db.models.brand import Brand, BrandStatus
from db.models.deal import Deal, DealStatus
from db.models.partner import Partner
from db.session import build_session_factory


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture()
def engine(tmp_path) -> Iterator[Engine]:
    """
    SQLite engine where SQLAlchemy, not pysqlite, emits BEGIN, so nested
    transactions map onto real SAVEPOINTs.
    """

    sqlite_engine = create_engine(
        f"sqlite:///{tmp_path / 'deals.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(sqlite_engine)
    try:
        yield sqlite_engine
    finally:
        sqlite_engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return build_session_factory(engine)


@pytest.fixture()
def db(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SeededAsset:
    asset_id: uuid.UUID
    page_id: uuid.UUID
    position_ids: list[uuid.UUID]


class Seeder:
    """
    Inserts fixtures through short-lived sessions so services under test
    always start from committed state.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def _persist(self, *rows: Any) -> None:
        with self._session_factory() as session, session.begin():
            session.add_all(rows)

    def partner(
        self,
        name: str = "Partner",
        *,
        is_direct: bool = False,
        has_contract: bool = True,
        has_license: bool = True,
        has_banking: bool = True,
    ) -> uuid.UUID:
        partner = Partner(
            id=uuid.uuid4(),
            name=name,
            is_direct=is_direct,
            has_contract=has_contract,
            has_license=has_license,
            has_banking=has_banking,
        )
        self._persist(partner)
        return partner.id

    def brand(
        self,
        partner_id: uuid.UUID,
        name: str,
        brand_domain: str | None = None,
        *,
        status: str = BrandStatus.ACTIVE,
    ) -> uuid.UUID:
        brand = Brand(
            id=uuid.uuid4(),
            partner_id=partner_id,
            name=name,
            brand_domain=brand_domain,
            status=status,
        )
        self._persist(brand)
        return brand.id

    def asset(
        self,
        asset_domain: str | None = "site.com",
        *,
        positions: int = 1,
    ) -> SeededAsset:
        asset = Asset(id=uuid.uuid4(), name=asset_domain or "No domain", asset_domain=asset_domain)
        page = Page(id=uuid.uuid4(), asset_id=asset.id, name="Home", path="/")
        slots = [
            Position(id=uuid.uuid4(), page_id=page.id, name=f"Slot {index + 1}")
            for index in range(positions)
        ]
        self._persist(asset, page, *slots)
        return SeededAsset(
            asset_id=asset.id,
            page_id=page.id,
            position_ids=[slot.id for slot in slots],
        )

    def deal(
        self,
        *,
        asset: SeededAsset,
        position_id: uuid.UUID,
        partner_id: uuid.UUID,
        brand_id: uuid.UUID,
        affiliate_link: str | None = None,
        tracking_domain: str | None = None,
        status: str = DealStatus.LIVE,
    ) -> uuid.UUID:
        deal = Deal(
            id=uuid.uuid4(),
            partner_id=partner_id,
            brand_id=brand_id,
            asset_id=asset.asset_id,
            page_id=asset.page_id,
            position_id=position_id,
            status=status,
            affiliate_link=affiliate_link,
            tracking_domain=tracking_domain,
            is_direct=False,
        )
        self._persist(deal)
        return deal.id

    def get_deal(self, deal_id: uuid.UUID) -> Deal | None:
        with self._session_factory() as session:
            return session.get(Deal, deal_id)

    def occupying_deals(self, position_id: uuid.UUID) -> list[Deal]:
        with self._session_factory() as session:
            stmt = (
                select(Deal)
                .where(Deal.position_id == position_id)
                .where(Deal.status != DealStatus.INACTIVE)
            )
            return list(session.scalars(stmt).all())

    def audit_actions(self, entity_id: uuid.UUID | None = None) -> list[str]:
        with self._session_factory() as session:
            stmt = select(AuditLog).order_by(AuditLog.created_at, AuditLog.action)
            if entity_id is not None:
                stmt = stmt.where(AuditLog.entity_id == str(entity_id))
            return [entry.action for entry in session.scalars(stmt).all()]


@pytest.fixture()
def seed(session_factory: sessionmaker[Session]) -> Seeder:
    return Seeder(session_factory)


# ---------------------------------------------------------------------------
# Page fetching
# ---------------------------------------------------------------------------


class FakeResponse:
    """
    Streamed response stand-in. Each chunk is delivered after ``delay`` seconds.
    """

    def __init__(
        self,
        text: str,
        status_code: int = 200,
        *,
        chunks: list[bytes] | None = None,
        delay: float = 0.0,
        encoding: str | None = "utf-8",
    ) -> None:
        self.text = text
        self.status_code = status_code
        self.encoding = encoding
        self.closed = False
        self._chunks = chunks
        self._delay = delay

    def iter_content(self, chunk_size: int = 1):
        chunks = self._chunks
        if chunks is None:
            chunks = [self.text.encode(self.encoding or "utf-8")]
        for chunk in chunks:
            if self._delay:
                time.sleep(self._delay)
            yield chunk

    def close(self) -> None:
        self.closed = True


class FakeRequestsSession:
    """
    Minimal ``requests.Session`` stand-in recording every GET.
    """

    def __init__(
        self,
        html: str = "",
        *,
        status_code: int = 200,
        error: requests.RequestException | None = None,
        chunks: list[bytes] | None = None,
        delay: float = 0.0,
        encoding: str | None = "utf-8",
    ) -> None:
        self.html = html
        self.status_code = status_code
        self.error = error
        self.chunks = chunks
        self.delay = delay
        self.encoding = encoding
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.responses: list[FakeResponse] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        response = FakeResponse(
            self.html,
            self.status_code,
            chunks=self.chunks,
            delay=self.delay,
            encoding=self.encoding,
        )
        self.responses.append(response)
        return response


@pytest.fixture()
def scan_settings() -> DealScanSettings:
    return DealScanSettings(timeout_seconds=5.0, user_agent="TestScanner/1.0", history_limit=20)


@pytest.fixture()
def fake_http() -> FakeRequestsSession:
    return FakeRequestsSession()


@pytest.fixture()
def scan_service(
    scan_settings: DealScanSettings,
    fake_http: FakeRequestsSession,
) -> DealScanService:
    fetcher = PageFetcher(settings=scan_settings, session=fake_http)  # type: ignore[arg-type]
    return DealScanService(settings=scan_settings, engine=DealScanEngine(fetcher=fetcher))


@pytest.fixture()
def lifecycle() -> DealLifecycleService:
    return DealLifecycleService(locks=PositionLockRegistry())


@pytest.fixture()
def confirmation_service(lifecycle: DealLifecycleService) -> ScanConfirmationService:
    return ScanConfirmationService(lifecycle=lifecycle)
