import os
import pytest

# Settings are read at import time; keep the app engine off Postgres in tests
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("OPENAI_API_KEY", "test-key")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from contractwatch.database import Base
from contractwatch.models import ContractRecord, OrganisationProfile

# SQLite in-memory; upserts use the sqlite dialect's ON CONFLICT support.
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="function")
def db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    # Drop tables
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def session_factory(db):
    """Hands the test session to workers that open their own."""
    return lambda: db

@pytest.fixture
def profile(db):
    org = OrganisationProfile(
        name="Acme Data Ltd",
        description="Data engineering and analytics consultancy",
        industry="Technology",
        size="small",
        capabilities=["data pipelines", "dashboards"],
        interests=["public sector analytics"],
        exclusions=["construction"],
        search_keywords=["data", "analytics"],
        location="Leeds",
    )
    db.add(org)
    db.commit()
    return org

def make_notice(item_id, **overrides):
    item = {
        "id": item_id,
        "parentId": None,
        "noticeIdentifier": f"NI-{item_id}",
        "title": f"Contract {item_id}",
        "description": "Provision of data services",
        "publishedDate": "2024-03-01T09:00:00Z",
        "deadlineDate": "2024-04-01T12:00:00Z",
        "valueLow": 10000,
        "valueHigh": 50000,
        "postcode": "LS1 4AP",
        "noticeType": "Contract",
        "noticeStatus": "Open",
        "isSuitableForSme": True,
        "isSuitableForVco": False,
        "organisationName": "Leeds City Council",
        "cpvCodes": "72000000",
        "region": "Yorkshire and the Humber",
    }
    item.update(overrides)
    return {"score": 1.0, "item": item}

@pytest.fixture
def notice_factory():
    return make_notice

@pytest.fixture
def add_contracts(db):
    def _add(count, prefix="c"):
        records = []
        for i in range(count):
            record = ContractRecord(item_id=f"{prefix}-{i}", title=f"Contract {i}")
            db.add(record)
            records.append(record)
        db.commit()
        return records
    return _add
