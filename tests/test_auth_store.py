from __future__ import annotations

import pytest

from pymax.auth.store import FileTokenStore


@pytest.mark.asyncio
async def test_token_store_roundtrip(tmp_path) -> None:
    store = FileTokenStore(tmp_path / "pymax.session")
    await store.save("abc123")

    again = FileTokenStore(tmp_path / "pymax.session")
    assert await again.load() == "abc123"


@pytest.mark.asyncio
async def test_missing_store_means_no_session(tmp_path) -> None:
    store = FileTokenStore(tmp_path / "nope" / "pymax.session")
    assert await store.load() is None


@pytest.mark.asyncio
async def test_stored_token_is_trimmed_and_blank_is_no_session(tmp_path) -> None:
    path = tmp_path / "pymax.session"
    path.write_text("  abc123 \n", "utf-8")
    assert await FileTokenStore(path).load() == "abc123"

    path.write_text(" \n\t", "utf-8")
    assert await FileTokenStore(path).load() is None


@pytest.mark.asyncio
async def test_clear_removes_token(tmp_path) -> None:
    store = FileTokenStore(tmp_path / "pymax.session")
    await store.save("abc123")
    await store.clear()
    await store.clear()

    assert await store.load() is None


@pytest.mark.asyncio
async def test_undecodable_store_means_no_session(tmp_path) -> None:
    path = tmp_path / "pymax.session"
    path.write_bytes(b"\xff\xfe\x00token")

    assert await FileTokenStore(path).load() is None
