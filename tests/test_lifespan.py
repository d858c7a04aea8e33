"""Tests for the lifespan dependency bridge."""

import os
from typing import Annotated
from unittest.mock import patch

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from vta.app import lifespan
from vta.core.retrieval import build_vector_index
from vta.infra.db import build_db
from vta.infra.lifespan import get_app


def _app_with_fake_db(events: list[str]) -> FastAPI:
    async def fake_db(app: Annotated[FastAPI, Depends(get_app)]):
        app.state.session_factory = "factory"
        events.append("db up")
        yield
        events.append("db down")

    app = FastAPI(lifespan=lifespan)
    app.dependency_overrides[build_db] = fake_db
    return app


class TestLifespan:
    def test_overridden_dependencies_run_and_tear_down(self):
        events: list[str] = []
        app = _app_with_fake_db(events)

        async def fake_index(app: Annotated[FastAPI, Depends(get_app)]):
            events.append("index up")
            yield
            events.append("index down")

        app.dependency_overrides[build_vector_index] = fake_index

        with TestClient(app):
            assert app.state.session_factory == "factory"
            assert events == ["db up", "index up"]

        assert events[2:] == ["index down", "db down"]

    def test_missing_pinecone_key_leaves_no_client(self):
        app = _app_with_fake_db([])
        env = {k: v for k, v in os.environ.items() if k != "PINECONE_API_KEY"}
        env["VTA_THIRD_PARTY__PINECONE_API_KEY"] = ""

        with patch.dict(os.environ, env, clear=True):
            with TestClient(app):
                assert app.state.pinecone is None
