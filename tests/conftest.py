# (c) Copyright Datacraft, 2026
"""Shared fixtures: settings, container, manager and a small tenant schema."""
import pytest
from sqlalchemy import ForeignKey, String, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from samehouse import BelongsToTenants, Container, TenantManager, set_container
from samehouse.config import Settings, reset_settings


class Base(DeclarativeBase):
    pass


class Company(Base):
    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))


class Project(BelongsToTenants, Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    company_id: Mapped[int | None] = mapped_column(ForeignKey("companies.id"))


class Note(BelongsToTenants, Base):
    __tablename__ = "notes"
    __tenant_columns__ = ["team_id"]

    id: Mapped[int] = mapped_column(primary_key=True)
    body: Mapped[str] = mapped_column(String(255))
    team_id: Mapped[int | None] = mapped_column()
    company_id: Mapped[int | None] = mapped_column()


@pytest.fixture
def settings():
    return Settings(
        default_tenant_columns=["company_id"],
        config_dir=None,
        tenant_resolution="header",
    )


@pytest.fixture
def container():
    container = Container()
    set_container(container)
    yield container
    set_container(None)
    reset_settings()


@pytest.fixture
def manager(settings):
    return TenantManager(settings)


@pytest.fixture
def session_factory(manager):
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    factory = sessionmaker(engine, expire_on_commit=False)
    manager.install(factory)
    yield factory
    manager.uninstall(factory)
    engine.dispose()


@pytest.fixture
def seeded(session_factory):
    """Two companies with two projects each and notes for two teams."""
    with session_factory() as session:
        session.add_all([
            Company(id=1, name="Acme"),
            Company(id=2, name="Globex"),
            Project(id=1, name="Rocket", company_id=1),
            Project(id=2, name="Anvil", company_id=1),
            Project(id=3, name="Hammock", company_id=2),
            Project(id=4, name="Doomsday", company_id=2),
            Note(id=1, body="first", team_id=10, company_id=1),
            Note(id=2, body="second", team_id=20, company_id=1),
        ])
        session.commit()
    return session_factory
