"""Tests for the full discovery flow, scheduler parsing and notifications."""

import json
from unittest.mock import patch

import pytest

from conftest import touch
from game_discovery import discord_notify, scan_flow
from game_discovery.scheduler import _parse_schedule
from game_discovery.store import DiscoveryStore


def _catalog(tmp_path, install_dir):
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps(
            {
                "games": [
                    {
                        "id": "foo",
                        "name": "Foo",
                        "required_files": ["foo.exe"],
                        "executable": "foo.exe",
                        "tools": [
                            {
                                "id": "bar",
                                "name": "Bar",
                                "required_files": ["bar.exe"],
                                "executable": "bar.exe",
                                "relative": True,
                            }
                        ],
                    },
                    {
                        "id": "quick",
                        "name": "Quick",
                        "required_files": ["quick.exe"],
                        "executable": "quick.exe",
                        "known_paths": [str(install_dir)],
                    },
                ]
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.mark.asyncio
async def test_full_discovery_updates_store(tmp_path):
    touch(tmp_path, "library/Foo/foo.exe", "library/Foo/tools/bar.exe", "installs/Quick/quick.exe")
    catalog = _catalog(tmp_path, tmp_path / "installs" / "Quick")
    state = tmp_path / "state.json"
    missing = str(tmp_path / "offline")

    summary = await scan_flow.run_discovery(
        mode="full",
        catalog_path=catalog,
        state_path=state,
        search_paths=[str(tmp_path / "library"), missing],
        discord_url="",
    )

    assert summary["new"] == ["foo", "quick"]
    assert summary["discovered"] == 2
    assert summary["errors"] == [{"title": "A search path doesn't exist or is not connected", "path": missing}]
    store = DiscoveryStore.load(state)
    assert store.games["foo"].path == str(tmp_path / "library" / "Foo")
    assert store.games["foo"].tools["bar"].path == str(tmp_path / "library" / "Foo" / "tools")
    assert store.games["quick"].path == str(tmp_path / "installs" / "Quick")
    assert store.last_discovery is not None
    progress = scan_flow.get_progress()
    assert [p["percent"] for p in progress] == [100, 100]


@pytest.mark.asyncio
async def test_manual_path_survives_discovery(tmp_path):
    touch(tmp_path, "library/Foo/foo.exe")
    catalog = _catalog(tmp_path, tmp_path / "nowhere")
    state = tmp_path / "state.json"
    store = DiscoveryStore(state)
    store.set_game_path("foo", "/my/foo")
    store.save()

    summary = await scan_flow.run_discovery(
        mode="search",
        catalog_path=catalog,
        state_path=state,
        search_paths=[str(tmp_path / "library")],
        discord_url="",
    )
    assert summary["new"] == []
    assert DiscoveryStore.load(state).games["foo"].path == "/my/foo"


@pytest.mark.asyncio
async def test_unknown_mode(tmp_path):
    with pytest.raises(ValueError):
        await scan_flow.run_discovery(mode="deep", catalog_path=tmp_path, state_path=tmp_path)


@pytest.mark.parametrize(
    "schedule, expected",
    [
        ("", None),
        ("daily", {"hour": 3, "minute": 0}),
        ("0 4 * * 1", {"minute": "0", "hour": "4", "day": "*", "month": "*", "day_of_week": "1"}),
        ("every now and then", None),
    ],
)
def test_parse_schedule(schedule, expected):
    assert _parse_schedule(schedule) == expected


def test_search_errors_posted():
    with patch.object(discord_notify, "_post_sync") as post:
        discord_notify.notify_search_errors("https://hook", [("title", "/mnt/x")])
    payload = post.call_args[0][1]
    assert payload["embeds"][0]["description"] == "title: /mnt/x"


def test_no_webhook_no_post():
    with patch.object(discord_notify, "_post_sync") as post:
        discord_notify.notify_discovery_started("", "full")
        discord_notify.notify_new_games("", ["Foo"])
    post.assert_not_called()
