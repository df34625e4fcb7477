"""Test configuration and fixtures."""

from typing import Dict, Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from headless_cms.db.base import Base
from headless_cms.db.models import ContentTypeModel, UserModel
from headless_cms.policy.models import Caller
from headless_cms.policy.roles import UserService, seed_defaults
from headless_cms.schema.service import ContentTypeService
from headless_cms.schemas.content import ContentTypeCreate, FieldCreate
from headless_cms.schemas.roles import UserCreate


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across sessions of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def seeded(db) -> Session:
    """Session with default roles and workflow transitions."""
    seed_defaults(db)
    return db


@pytest.fixture
def users(seeded) -> Dict[str, UserModel]:
    """One user per default role, keyed by role name."""
    service = UserService(seeded)
    return {
        role: service.create(UserCreate(email=f"{role}@example.com", role=role))
        for role in (
            "admin",
            "editor",
            "manager",
            "viewer",
            "seo_specialist",
            "content_writer",
        )
    }


def caller_for(user: UserModel) -> Caller:
    return Caller(user_id=user.id, role=user.role.to_policy())


@pytest.fixture
def callers(users) -> Dict[str, Caller]:
    return {role: caller_for(user) for role, user in users.items()}


def article_fields():
    return [
        FieldCreate(name="title", type="string", required=True, min_length=3, max_length=100),
        FieldCreate(name="slug", type="string", unique=True),
        FieldCreate(name="body", type="text"),
        FieldCreate(name="rating", type="number", min_value=0, max_value=5),
        FieldCreate(name="featured", type="boolean", default_value="false"),
        FieldCreate(name="cover", type="media"),
        FieldCreate(name="meta_title", type="string", is_seo=True, max_length=60),
        FieldCreate(name="meta_description", type="text", is_seo=True),
    ]


@pytest.fixture
def article_type(seeded) -> ContentTypeModel:
    return ContentTypeService(seeded).create(
        ContentTypeCreate(name="Article", slug="article", fields=article_fields())
    )
