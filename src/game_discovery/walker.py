"""Stream a directory tree and report files whose basename is being searched for."""

import asyncio
import logging
import os
from dataclasses import dataclass
from itertools import islice
from typing import Awaitable, Callable, Iterator

from game_discovery.normalize import Normalize
from game_discovery.progress import DirectoryEstimate, Progress

logger = logging.getLogger(__name__)

BATCH_SIZE = 512


@dataclass(frozen=True)
class WalkEntry:
    path: str
    is_dir: bool = False
    is_terminator: bool = False  # all children of this directory were emitted


def _read_dir(directory: str) -> tuple[list[WalkEntry], list[str]]:
    entries: list[WalkEntry] = []
    subdirs: list[str] = []
    with os.scandir(directory) as it:
        for dir_entry in it:
            try:
                is_dir = dir_entry.is_dir(follow_symlinks=False)
            except OSError:
                is_dir = False
            entries.append(WalkEntry(dir_entry.path, is_dir=is_dir))
            if is_dir:
                subdirs.append(dir_entry.path)
    return entries, subdirs


def iter_tree(root: str) -> Iterator[WalkEntry]:
    """
    Yield every entry below root. A directory's own entries are yielded
    together, before any of its subdirectories is read, and a terminator
    entry follows once the whole subtree was visited.
    Unreadable subdirectories are skipped; an unreadable root raises.
    """
    entries, subdirs = _read_dir(root)
    yield from entries
    stack = [(root, iter(subdirs))]
    while stack:
        directory, children = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            yield WalkEntry(directory, is_dir=True, is_terminator=True)
            continue
        try:
            entries, subdirs = _read_dir(child)
        except OSError as e:
            logger.debug("skipping unreadable directory %s: %s", child, e)
            yield WalkEntry(child, is_dir=True, is_terminator=True)
            continue
        yield from entries
        stack.append((child, iter(subdirs)))


def _next_batch(entries: Iterator[WalkEntry], size: int) -> list[WalkEntry]:
    return list(islice(entries, size))


async def walk(
    search_path: str,
    match_list: set[str],
    on_match: Callable[[str], Awaitable[None]],
    progress: Progress | None,
    normalize: Normalize,
    batch_size: int = BATCH_SIZE,
) -> int:
    """
    Walk search_path, awaiting on_match for every file whose normalized
    basename is in match_list. Matches don't stop the search in that
    directory. Returns the number of directories seen.
    """
    estimate = DirectoryEstimate(search_path)
    entries = iter_tree(search_path)
    is_top_level = True
    while True:
        batch = await asyncio.to_thread(_next_batch, entries, batch_size)
        if not batch:
            break
        done_count = 0
        last_completed = None
        for entry in batch:
            if entry.is_terminator:
                if estimate.directory_done(entry.path) and progress is not None:
                    progress.set_step_count(estimate.estimated_total)
                done_count += 1
                last_completed = entry.path
            elif entry.is_dir:
                if is_top_level and os.sep in os.path.relpath(entry.path, search_path):
                    # Past the root's own children, the top-level set is final.
                    is_top_level = False
                estimate.directory_seen(entry.path, is_top_level)
            elif normalize(os.path.basename(entry.path)) in match_list:
                logger.info("potential match %s", entry.path)
                await on_match(entry.path)
        if progress is not None:
            if estimate.check_overrun():
                progress.set_step_count(estimate.estimated_total)
            progress.completed(last_completed, done_count)
    return estimate.seen_directories
