"""Shared pytest fixtures for ColorIA tests."""

import shutil
import tempfile
from collections.abc import Generator
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from coloria.core.config import ColoriaConfig
from coloria.core.errors import TransportError
from coloria.core.library_db import LibraryDB
from coloria.core.records import ImageDownload, SavedImageRecord, SoftDeleteResult
from coloria.core.services import AppServices, build_services
from coloria.core.session import LocalAuthProvider, SessionContext, User
from coloria.ui.models import UIState
from coloria.ui.state import set_services


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> ColoriaConfig:
    """Create a test configuration with temporary directories.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        ColoriaConfig instance for testing
    """
    return ColoriaConfig(
        data_dir=temp_dir / "data",
        assets_dir=temp_dir / "data" / "assets",
        downloads_dir=temp_dir / "data" / "downloads",
        public_base_url="http://testserver",
        fal_endpoint="https://generation.test/run",
        fal_key="test-key",
        search_debounce_ms=10,
    )


@pytest.fixture
def library_db(temp_dir: Path) -> LibraryDB:
    """Empty library database in the temp directory."""
    return LibraryDB(temp_dir / "library.db")


@pytest.fixture
def auth_provider(temp_dir: Path) -> LocalAuthProvider:
    return LocalAuthProvider(temp_dir / "library.db")


def make_record(
    record_id: str,
    prompt: str = "",
    owner_id: str = "user-1",
    minutes: int = 0,
) -> SavedImageRecord:
    """Build a record whose ``created_at`` is ``minutes`` after a fixed epoch."""
    return SavedImageRecord(
        id=record_id,
        owner_id=owner_id,
        image_url=f"https://cdn.test/{record_id}.png",
        prompt=prompt,
        style="default",
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes),
    )


@pytest.fixture
def record_factory():
    """The :func:`make_record` builder, for tests that need custom records."""
    return make_record


@pytest.fixture
def sample_records() -> list[SavedImageRecord]:
    """Five records, newest first, as ``list_active`` would return them."""
    return [
        make_record("img-5", "Red Fox in snow", minutes=5),
        make_record("img-4", "Blue Sky", minutes=4),
        make_record("img-3", "", minutes=3),
        make_record("img-2", "red barn", minutes=2),
        make_record("img-1", "Green field", minutes=1),
    ]


class FakeGateway:
    """In-memory persistence gateway recording every call.

    Set ``fail`` to make every call raise :class:`TransportError`, or
    ``soft_delete_success`` to False to simulate a rejected delete.
    """

    def __init__(self, records: list[SavedImageRecord] | None = None):
        self.records = list(records or [])
        self.calls: list[tuple] = []
        self.fail: str | None = None
        self.soft_delete_success = True

    def _check(self) -> None:
        if self.fail:
            raise TransportError(self.fail)

    def _active(self, owner_id: str) -> list[SavedImageRecord]:
        return [r for r in self.records if r.owner_id == owner_id and r.deleted_at is None]

    def list_active(self, owner_id, sort_field="created_at", direction="desc"):
        self.calls.append(("list_active", owner_id, sort_field, direction))
        self._check()
        key = (lambda r: r.created_at) if sort_field == "created_at" else (lambda r: r.prompt)
        return sorted(self._active(owner_id), key=key, reverse=direction == "desc")

    def search_active(self, owner_id, query):
        self.calls.append(("search_active", owner_id, query))
        self._check()
        needle = query.lower()
        return [r for r in self._active(owner_id) if needle in r.prompt.lower()]

    def resolve_urls(self, image_ids):
        self.calls.append(("resolve_urls", list(image_ids)))
        self._check()
        by_id = {r.id: r for r in self.records if r.deleted_at is None}
        return [
            ImageDownload(by_id[i].image_url, by_id[i].prompt) for i in image_ids if i in by_id
        ]

    def soft_delete(self, image_ids, owner_id=None):
        self.calls.append(("soft_delete", sorted(image_ids), owner_id))
        self._check()
        if not self.soft_delete_success:
            return SoftDeleteResult(success=False)
        deleted_at = datetime.now(timezone.utc)
        ids = set(image_ids)
        self.records = [
            replace(r, deleted_at=deleted_at) if r.id in ids else r
            for r in self.records
        ]
        return SoftDeleteResult(success=True, deleted_ids=tuple(sorted(ids)))


@pytest.fixture
def gateway_factory():
    return FakeGateway


@pytest.fixture
def fake_gateway(sample_records) -> FakeGateway:
    return FakeGateway(sample_records)


@pytest.fixture
def signed_in_session(auth_provider) -> SessionContext:
    """Mounted session with ``user-1`` signed in."""
    session = SessionContext(auth_provider).mount()
    session.current_user = User(id="user-1", email="ada@example.com", full_name="Ada")
    return session


@pytest.fixture
def services(test_config: ColoriaConfig) -> Generator[AppServices, None, None]:
    """Shared services built from ``test_config`` and installed for the UI."""
    app_services = build_services(test_config)
    set_services(app_services)
    try:
        yield app_services
    finally:
        set_services(None)


@pytest.fixture
def ui_state() -> UIState:
    """Create empty UI state for testing.

    Returns:
        UIState instance
    """
    return UIState()
