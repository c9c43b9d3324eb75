"""
Blog Posts API: Server Lifecycle Tests
=======================================

What:  BlogServer state transitions and cleanup on start failures.
How:   BlogServer binds a real socket on 127.0.0.1. Most tests replace
       uvicorn.Server with a fake that reports itself started without
       serving; TestBlogServerServing runs the real one end to end.
       The store is a real SQLite file.
"""

import asyncio
import socket
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from blog_api.database import Database
from blog_api.server import BlogServer, ServerState


class FakeUvicornServer:
    """Minimal stand-in for uvicorn.Server."""

    def __init__(self, config):
        self.config = config
        self.started = False
        self.should_exit = False
        self.servers = []

    async def serve(self, sockets=None):
        self.started = True
        while not self.should_exit:
            await asyncio.sleep(0.01)


class FailingStartupServer(FakeUvicornServer):
    async def serve(self, sockets=None):
        # lifespan startup failed: uvicorn returns without ever listening
        return None


class TestBlogServerLifecycle:

    @pytest.mark.asyncio
    async def test_start_and_stop(self, test_settings):
        server = BlogServer(test_settings)
        assert server.state is ServerState.STOPPED

        with patch("blog_api.server.uvicorn.Server", FakeUvicornServer):
            await server.start()
            assert server.state is ServerState.LISTENING
            assert server.database is not None
            assert server.port > 0

            await server.stop()

        assert server.state is ServerState.STOPPED

    @pytest.mark.asyncio
    async def test_stop_disposes_database(self, test_settings):
        database = Database.from_settings(test_settings)
        server = BlogServer(test_settings, database=database)

        with patch("blog_api.server.uvicorn.Server", FakeUvicornServer), \
             patch.object(database, "dispose", wraps=database.dispose) as dispose:
            await server.start()
            await server.stop()

        dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_start_twice_is_rejected(self, test_settings):
        server = BlogServer(test_settings)

        with patch("blog_api.server.uvicorn.Server", FakeUvicornServer):
            await server.start()
            try:
                with pytest.raises(RuntimeError):
                    await server.start()
            finally:
                await server.stop()

    @pytest.mark.asyncio
    async def test_stop_when_stopped_is_noop(self, test_settings):
        server = BlogServer(test_settings)

        await server.stop()

        assert server.state is ServerState.STOPPED

    @pytest.mark.asyncio
    async def test_bind_failure_cleans_up(self, test_settings):
        blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        blocker.bind(("127.0.0.1", 0))
        blocker.listen()
        config = test_settings.model_copy(
            update={"host": "127.0.0.1", "port": blocker.getsockname()[1]}
        )
        database = Database.from_settings(config)
        server = BlogServer(config, database=database)

        try:
            with patch("blog_api.server.uvicorn.Server", FakeUvicornServer), \
                 patch.object(database, "dispose", wraps=database.dispose) as dispose:
                with pytest.raises(OSError):
                    await server.start()
        finally:
            blocker.close()

        assert server.state is ServerState.STOPPED
        assert server.port is None
        dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_app_startup_failure_cleans_up(self, test_settings):
        server = BlogServer(test_settings)

        with patch("blog_api.server.uvicorn.Server", FailingStartupServer):
            with pytest.raises(RuntimeError):
                await server.start()

        assert server.state is ServerState.STOPPED

    @pytest.mark.asyncio
    async def test_unreachable_store_aborts_start(self, test_settings, tmp_path):
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nowhere.db'}")
        server = BlogServer(test_settings, database=database)

        with patch("blog_api.server.uvicorn.Server", FakeUvicornServer):
            with pytest.raises(OperationalError):
                await server.start()

        assert server.state is ServerState.STOPPED


class TestBlogServerServing:

    @pytest.mark.asyncio
    async def test_serves_requests_until_stopped(self, test_settings, new_post_payload):
        config = test_settings.model_copy(update={"db_create_all": True})
        server = BlogServer(config)

        await server.start()
        try:
            base_url = f"http://127.0.0.1:{server.port}"
            async with AsyncClient(base_url=base_url, trust_env=False) as client:
                created = await client.post("/blog-posts", json=new_post_payload)
                fetched = await client.get(f"/blog-posts/{created.json()['id']}")
        finally:
            await server.stop()

        assert created.status_code == 201
        assert fetched.status_code == 200
        assert fetched.json()["title"] == new_post_payload["title"]
        assert server.state is ServerState.STOPPED
        assert server.port is None
