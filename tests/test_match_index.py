"""Tests for the match index built from required files."""

import pytest

from conftest import make_game, make_tool
from game_discovery.match_index import (
    MatchIndex,
    relative_tool_files,
    search_files,
    tool_files_for_game,
)
from game_discovery.models import DiscoveredToolResult, DiscoveryResult
from game_discovery.normalize import make_normalize

normalize = make_normalize(True)


def _found_tool(tool_id, executable="x.exe"):
    return DiscoveredToolResult(tool_id=tool_id, path="/somewhere", executable=executable)


class TestFileSelection:
    def test_search_skips_discovered_games(self):
        foo = make_game("foo", ["foo.exe"])
        bar = make_game("bar", ["bar.exe", "data/bar.pak"])
        files = search_files([foo, bar], {"foo": DiscoveryResult(path="/games/foo")}, normalize)
        assert [f.file_name for f in files] == ["bar.exe", "data/bar.pak"]
        assert {f.game_id for f in files} == {"bar"}

    def test_search_includes_undiscovered_non_relative_tools(self):
        editor = make_tool("editor", ["editor.exe"])
        helper = make_tool("helper", ["helper.exe"], relative=True)
        found = make_tool("found", ["found.exe"])
        game = make_game("foo", ["foo.exe"], supported_tools=(editor, helper, found))
        prior = {"foo": DiscoveryResult(path="/g", tools={"found": _found_tool("found")})}
        files = search_files([game], prior, normalize)
        assert [(f.file_name, f.application.id) for f in files] == [("editor.exe", "editor")]

    def test_tool_files_owned_by_game(self):
        editor = make_tool("editor", ["editor.exe"])
        game = make_game("foo", ["foo.exe"], supported_tools=(editor,))
        files = tool_files_for_game(game, {}, normalize)
        assert files[0].game_id == "foo"
        assert files[0].application is editor

    def test_relative_tools_without_executable_still_searched(self):
        helper = make_tool("helper", ["tools/helper.exe"], relative=True)
        other = make_tool("other", ["other.exe"], relative=True)
        game = make_game("foo", ["foo.exe"], supported_tools=(helper, other))
        known = {"helper": _found_tool("helper", executable=None), "other": _found_tool("other")}
        files = relative_tool_files(game, known, normalize)
        assert [f.application.id for f in files] == ["helper"]


class TestMatchIndex:
    def test_match_list_holds_basenames(self):
        game = make_game("foo", ["bin/launcher.exe", "data.pak"])
        index = MatchIndex.build(search_files([game], {}, normalize), normalize)
        assert index.match_list == {"launcher.exe", "data.pak"}
        assert len(index) == 2

    def test_nested_required_file_gives_root_above_it(self):
        game = make_game("foo", ["bin/launcher.exe"])
        index = MatchIndex.build(search_files([game], {}, normalize), normalize)
        [(entry, root)] = index.candidates("/games/Foo/bin/launcher.exe")
        assert entry.application is game
        assert root == "/games/Foo"

    def test_nested_required_file_needs_full_suffix(self):
        game = make_game("foo", ["bin/launcher.exe"])
        index = MatchIndex.build(search_files([game], {}, normalize), normalize)
        assert index.candidates("/games/Foo/launcher.exe") == []
        assert index.candidates("/games/Foo/xbin/launcher.exe") == []

    def test_basename_collision_not_cross_matched(self):
        nested = make_game("nested", ["tool/launch.exe"])
        flat = make_game("flat", ["launch.exe"])
        index = MatchIndex.build(search_files([nested, flat], {}, normalize), normalize)

        flat_hit = index.candidates("/r/A/launch.exe")
        assert [(e.game_id, root) for e, root in flat_hit] == [("flat", "/r/A")]

        nested_hit = index.candidates("/r/B/tool/launch.exe")
        assert sorted((e.game_id, root) for e, root in nested_hit) == [
            ("flat", "/r/B/tool"),
            ("nested", "/r/B"),
        ]

    def test_case_insensitive_match_keeps_original_spelling(self):
        folding = make_normalize(False)
        game = make_game("foo", ["Bin/Launcher.exe"])
        index = MatchIndex.build(search_files([game], {}, folding), folding)
        [(_, root)] = index.candidates("/Games/FOO/BIN/LAUNCHER.EXE")
        assert root == "/Games/FOO"

    def test_windows_paths(self):
        folding = make_normalize(False)
        game = make_game("foo", ["bin\\game.exe"])
        index = MatchIndex.build(search_files([game], {}, folding), folding)
        [(_, root)] = index.candidates("D:\\Games\\Foo\\bin\\game.exe")
        assert root == "D:\\Games\\Foo"

    @pytest.mark.parametrize(
        "hit, expected",
        [("/foo.exe", "/"), ("C:\\foo.exe", "C:\\")],
    )
    def test_file_in_filesystem_root(self, hit, expected):
        game = make_game("foo", ["foo.exe"])
        index = MatchIndex.build(search_files([game], {}, normalize), normalize)
        [(_, root)] = index.candidates(hit)
        assert root == expected

    def test_empty_index_matches_nothing(self):
        index = MatchIndex.build([], normalize)
        assert index.normalize is normalize
        assert index.match_list == set()
        assert index.candidates("/games/Foo/foo.exe") == []
