"""
Blog Posts API: Application Wiring Tests
=========================================

What:  Settings validation, request error summarizing and the Database handle.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from blog_api.config import Settings
from blog_api.database import Database
from blog_api.main import summarize_request_errors
from blog_api.schemas.blog_post import BlogPostCreate, BlogPostUpdate


class TestSettings:

    def test_port_from_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9090")

        assert Settings().port == 9090

    def test_database_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./other.db")

        config = Settings()

        assert config.database_url == "sqlite+aiosqlite:///./other.db"
        assert config.is_sqlite

    def test_log_level_is_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(log_level="chatty")

    def test_landing_page_ships_with_package(self):
        assert Settings().landing_page_path.is_file()


class TestSummarizeRequestErrors:

    def test_missing_field(self):
        errors = [
            {"type": "missing", "loc": ("body", "author"), "msg": "Field required"},
            {"type": "missing", "loc": ("body", "content"), "msg": "Field required"},
        ]

        assert summarize_request_errors(errors) == ("Missing `author` in request body", "author")

    def test_nested_field(self):
        errors = [{"type": "string_type", "loc": ("body", "author", "firstName"), "msg": "Input should be a valid string"}]

        message, field = summarize_request_errors(errors)

        assert field == "author.firstName"
        assert message == "Invalid `author.firstName` in request body: Input should be a valid string"

    def test_invalid_json(self):
        errors = [{"type": "json_invalid", "loc": ("body", 14), "msg": "JSON decode error"}]

        assert summarize_request_errors(errors) == ("Request body is not valid JSON", None)

    def test_missing_body_reads_as_empty_object(self):
        errors = [{"type": "missing", "loc": ("body",), "msg": "Field required"}]

        assert summarize_request_errors(errors, BlogPostCreate) == (
            "Missing `title` in request body",
            "title",
        )

    def test_missing_body_without_required_fields(self):
        errors = [{"type": "missing", "loc": ("body",), "msg": "Field required"}]

        assert summarize_request_errors(errors, BlogPostUpdate) == ("Missing request body", None)
        assert summarize_request_errors(errors) == ("Missing request body", None)

    def test_no_errors(self):
        assert summarize_request_errors([]) == ("Invalid request", None)


class TestDatabase:

    @pytest.mark.asyncio
    async def test_connect_and_ping(self, test_settings):
        database = Database.from_settings(test_settings)
        try:
            await database.connect()
            assert await database.ping() is True
        finally:
            await database.dispose()

    @pytest.mark.asyncio
    async def test_ping_unreachable_returns_false(self, tmp_path):
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nowhere.db'}")
        try:
            assert await database.ping() is False
        finally:
            await database.dispose()

    def test_pool_options_only_for_server_databases(self):
        config = Settings(database_url="postgresql+asyncpg://u:p@localhost/db", db_pool_size=7)

        database = Database.from_settings(config)

        assert database.engine.sync_engine.pool.size() == 7
