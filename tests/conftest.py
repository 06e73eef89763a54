import logging

import pytest
from fastapi import APIRouter, Request
from fastapi.testclient import TestClient

import app.movements.store as store_module
from app.config import Settings
from app.main import create_app
from app.movements.store import MovementStore


@pytest.fixture(autouse=True)
def movement_store(tmp_path):
    """Point the store singleton at a throwaway database for each test."""
    store = MovementStore(str(tmp_path / "movements.db"))
    store_module._store = store
    yield store
    store_module._store = None
    store.close()


@pytest.fixture
def test_settings():
    return Settings(_env_file=None)


@pytest.fixture
def client(test_settings):
    return TestClient(create_app(settings=test_settings), raise_server_exceptions=False)


@pytest.fixture
def probe_router():
    """A stand-in movements router that exposes what the middleware hands it."""
    router = APIRouter()

    @router.post("/echo")
    async def echo(request: Request):
        return {"parsed": request.state.json}

    @router.post("/raw")
    async def raw(request: Request):
        body = await request.body()
        return {"raw": body.decode(), "parsed": hasattr(request.state, "json")}

    @router.post("/model")
    async def model(payload: dict):
        return {"payload": payload}

    @router.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    return router


@pytest.fixture
def probe_client(test_settings, probe_router):
    return TestClient(
        create_app(settings=test_settings, movements_router=probe_router),
        raise_server_exceptions=False,
    )


@pytest.fixture
def access_records(caplog):
    """Collect records from the access logger, which doesn't propagate to root."""
    access_logger = logging.getLogger("app.access")
    access_logger.addHandler(caplog.handler)
    yield caplog
    access_logger.removeHandler(caplog.handler)
