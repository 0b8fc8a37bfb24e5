import logging

import pytest
import pytest_asyncio

from linked_orm import db_context

from tests.models import Post


@pytest.fixture(autouse=True)
def _debug_logging(caplog):
    caplog.set_level(logging.DEBUG, logger="linked_orm")


@pytest.fixture(autouse=True)
def _reset_hooks():
    Post.destroyed_titles.clear()
    yield
    Post.destroyed_titles.clear()


@pytest_asyncio.fixture
async def ctx(tmp_path):
    """A fresh database with every registered table created."""
    context = db_context(str(tmp_path / "data" / "test.db"), sync_schema=True)
    await context.initialize()
    return context
