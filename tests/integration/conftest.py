"""Pytest fixtures for integration tests."""
import pytest
from click.testing import CliRunner
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from order_desk.models import Base
from order_desk.main import cli


@pytest.fixture(scope="function")
def session_factory():
    """Session factory over an in-memory SQLite database shared by every session."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function")
def shell(session_factory):
    """Run the interactive shell with the given answers, one per prompt."""
    runner = CliRunner()

    def run(*answers):
        return runner.invoke(
            cli,
            ["shell"],
            input="".join(f"{answer}\n" for answer in answers),
            obj={"session_factory": session_factory},
        )

    return run
