from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError, IntegrityError

from src.domain.exceptions import StorageFailure, ConflictError
from src.infrastructure.persistence.unit_of_work import SQLAlchemyUnitOfWork


def _operational_error():
    return OperationalError("SELECT 1", {}, Exception("database is locked"))


@pytest.fixture
def mock_session():
    session = AsyncMock()
    return session


async def test_run_read_retries_transient_errors(mock_session):
    uow = SQLAlchemyUnitOfWork(mock_session, read_attempts=2)
    operation = AsyncMock(side_effect=[_operational_error(), "spaces"])

    assert await uow.run_read(operation) == "spaces"
    assert operation.await_count == 2
    mock_session.rollback.assert_awaited_once()
    mock_session.commit.assert_awaited_once()


async def test_run_read_gives_up_after_last_attempt(mock_session):
    uow = SQLAlchemyUnitOfWork(mock_session, read_attempts=2)
    operation = AsyncMock(side_effect=_operational_error())

    with pytest.raises(StorageFailure):
        await uow.run_read(operation)
    assert operation.await_count == 2


async def test_run_read_passes_domain_errors_through(mock_session):
    uow = SQLAlchemyUnitOfWork(mock_session)
    operation = AsyncMock(side_effect=ConflictError("nope"))

    with pytest.raises(ConflictError):
        await uow.run_read(operation)
    assert operation.await_count == 1


async def test_block_commits_on_success(mock_session):
    uow = SQLAlchemyUnitOfWork(mock_session)

    async with uow:
        pass

    mock_session.commit.assert_awaited_once()
    mock_session.rollback.assert_not_awaited()


async def test_block_rolls_back_domain_errors(mock_session):
    uow = SQLAlchemyUnitOfWork(mock_session)

    with pytest.raises(ConflictError):
        async with uow:
            raise ConflictError("space taken")

    mock_session.rollback.assert_awaited_once()
    mock_session.commit.assert_not_awaited()


async def test_block_translates_storage_errors(mock_session):
    uow = SQLAlchemyUnitOfWork(mock_session)

    with pytest.raises(StorageFailure):
        async with uow:
            raise IntegrityError("INSERT", {}, Exception("constraint failed"))

    mock_session.rollback.assert_awaited_once()


async def test_commit_failure_is_storage_failure(mock_session):
    mock_session.commit.side_effect = _operational_error()
    uow = SQLAlchemyUnitOfWork(mock_session)

    with pytest.raises(StorageFailure):
        async with uow:
            pass

    mock_session.rollback.assert_awaited_once()
