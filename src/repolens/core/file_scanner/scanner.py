"""
DirectoryScanner implementation for recursive directory scanning.
"""

import logging
import os
import stat
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

import pathspec

from repolens.core.errors import PathNotFoundError, ScanCancelledError
from repolens.core.gitignore import gitignore_matches, load_gitignore_spec
from repolens.core.ignore_filter import IgnoreFilter, file_extension, matches_ignore_pattern

from .cancellation import CancellationToken
from .interfaces import DirectoryScannerInterface
from .models import EntryKind, FileInfo, ScanConfig, ScanResult

logger = logging.getLogger(__name__)

# (st_dev, st_ino) of a directory
InodeKey = tuple[int, int]


@dataclass(frozen=True)
class _DirectoryTask:
    """One directory to read: the unit of work in both traversal modes."""

    path: str
    rel_path: str
    depth: int
    # Only set when following links
    key: InodeKey | None = None
    via_link: bool = False


# Entries read from one directory: (FileInfo, subdirectory task or None)
Listing = list[tuple[FileInfo, _DirectoryTask | None]]


@dataclass(frozen=True)
class _ScanContext:
    """Per-scan state shared read-only by all traversal steps."""

    config: ScanConfig
    root: str
    ignore_filter: IgnoreFilter | None = None
    gitignore: pathspec.PathSpec | None = None
    cancellation: CancellationToken | None = None

    def check_cancelled(self, entries_seen: int = 0) -> None:
        if self.cancellation is not None and self.cancellation.cancelled:
            raise ScanCancelledError(self.root, entries_seen)


def _timestamp(value: float | None) -> int:
    """Convert a stat timestamp to whole epoch seconds, 0 if unavailable."""
    if value is None or value < 0:
        return 0
    return int(value)


def _created_time(st: os.stat_result) -> int:
    """Best-effort creation time: birthtime where supported, else 0."""
    birthtime = getattr(st, "st_birthtime", None)
    if birthtime is not None:
        return _timestamp(birthtime)
    if sys.platform == "win32":
        # st_ctime is the creation time on Windows
        return _timestamp(st.st_ctime)
    return 0


def _entry_kind(entry: os.DirEntry) -> EntryKind:
    """Classify a directory entry without following symlinks."""
    if entry.is_symlink():
        return EntryKind.SYMLINK
    if entry.is_dir(follow_symlinks=False):
        return EntryKind.DIRECTORY
    if entry.is_file(follow_symlinks=False):
        return EntryKind.FILE
    return EntryKind.OTHER


def _to_file_info(path: str, name: str, st: os.stat_result) -> FileInfo:
    is_dir = stat.S_ISDIR(st.st_mode)
    return FileInfo(
        path=path,
        name=name,
        size=st.st_size,
        is_dir=is_dir,
        extension="" if is_dir else file_extension(name),
        modified_time=_timestamp(st.st_mtime),
        created_time=_created_time(st),
    )


def _root_name(path: str) -> str:
    """Name reported for the root entry ('.' for the current directory)."""
    return os.path.basename(os.path.normpath(path))


class DirectoryScanner(DirectoryScannerInterface):
    """
    Concrete implementation of DirectoryScannerInterface.

    Provides recursive directory scanning with:
    - Substring (or path segment) ignore patterns on names and relative paths
    - Optional size/extension rules through IgnoreFilter
    - Optional root .gitignore support (using pathspec)
    - Depth limiting, with the root at depth 0
    - Symlink following with a visited inode guard: every directory is
      descended at most once per scan
    - Sequential or thread-pool traversal with identical output
    - Graceful handling of unreadable entries

    The scanner holds no per-scan state; one instance can run several scans
    concurrently.
    """

    def scan(
        self, config: ScanConfig, cancellation: CancellationToken | None = None
    ) -> ScanResult:
        """
        Scan the tree rooted at config.path.

        Args:
            config: Scan configuration
            cancellation: Optional token checked between traversal steps

        Returns:
            ScanResult snapshot

        Raises:
            PathNotFoundError: If config.path does not exist
            ScanCancelledError: If cancellation was requested
        """
        start = time.perf_counter()
        root_path = Path(config.path)

        if not root_path.exists():
            logger.error(f"Root path does not exist: {config.path}")
            raise PathNotFoundError(config.path)

        ctx = _ScanContext(
            config=config,
            root=config.path,
            ignore_filter=IgnoreFilter(config.filter_config) if config.filter_config else None,
            gitignore=load_gitignore_spec(root_path) if config.respect_gitignore else None,
            cancellation=cancellation,
        )

        if root_path.is_dir():
            entries = self._scan_tree(ctx)
        else:
            entries = self._scan_single_file(ctx)

        duration_ms = int((time.perf_counter() - start) * 1000)
        result = ScanResult.from_entries(entries, duration_ms=duration_ms)
        logger.info(
            f"Scanned {config.path}: {result.file_count} files, {result.dir_count} dirs, "
            f"{result.total_size} bytes in {result.duration_ms}ms "
            f"({'parallel' if config.parallel else 'sequential'})"
        )
        return result

    def _scan_single_file(self, ctx: _ScanContext) -> list[FileInfo]:
        """Handle a root that is a regular file rather than a directory."""
        try:
            st = os.stat(ctx.root) if ctx.config.follow_links else os.lstat(ctx.root)
        except OSError as e:
            logger.debug(f"Cannot read metadata for {ctx.root}: {e}")
            return []

        info = _to_file_info(ctx.root, _root_name(ctx.root), st)
        if ctx.ignore_filter is not None and ctx.ignore_filter.should_exclude(info.name, info.size):
            return []
        return [info]

    def _scan_tree(self, ctx: _ScanContext) -> list[FileInfo]:
        """Report the root directory, then walk it in the configured mode."""
        try:
            root_stat = os.stat(ctx.root)
        except OSError as e:
            logger.warning(f"Cannot read metadata for scan root {ctx.root}: {e}")
            return []

        entries = [_to_file_info(ctx.root, _root_name(ctx.root), root_stat)]

        if ctx.config.max_depth == 0:
            return entries

        root_key = None
        if ctx.config.follow_links:
            root_key = (root_stat.st_dev, root_stat.st_ino)

        root_task = _DirectoryTask(path=ctx.root, rel_path="", depth=0, key=root_key)
        listings = self._read_tree(ctx, root_task)
        entries.extend(self._flatten(listings, root_task))
        return entries

    def _read_tree(self, ctx: _ScanContext, root_task: _DirectoryTask) -> dict[str, Listing]:
        """
        Read the tree one depth level at a time.

        The directories of a level are read on the calling thread or on the
        thread pool; either way the calling thread alone decides which
        subdirectories to descend, in the same order. With follow_links a
        directory inode is descended once, through its shallowest path. At
        equal depth real directories win over links, then name order decides.
        Later aliases are still reported, but not descended.

        Returns:
            Listing of every directory read, keyed by its path
        """
        listings: dict[str, Listing] = {}
        visited: set[InodeKey] = {root_task.key} if root_task.key is not None else set()
        level = [root_task]
        seen = 0

        executor = None
        if ctx.config.parallel:
            executor = ThreadPoolExecutor(
                max_workers=ctx.config.max_workers, thread_name_prefix="repolens-scan"
            )

        try:
            while level:
                ctx.check_cancelled(seen)
                results = list(zip(level, self._read_level(ctx, level, executor)))

                for links_pass in (False, True):
                    for _, listing in results:
                        for index, (info, child) in enumerate(listing):
                            if child is None or child.key is None or child.via_link != links_pass:
                                continue
                            if child.key in visited:
                                logger.debug(f"Already visited, not descending: {child.path}")
                                listing[index] = (info, None)
                            else:
                                visited.add(child.key)

                level = []
                for task, listing in results:
                    listings[task.path] = listing
                    seen += len(listing)
                    level.extend(child for _, child in listing if child is not None)
        finally:
            if executor is not None:
                executor.shutdown(wait=True, cancel_futures=True)

        return listings

    def _read_level(
        self,
        ctx: _ScanContext,
        level: list[_DirectoryTask],
        executor: ThreadPoolExecutor | None,
    ) -> list[Listing]:
        """Read every directory of one level, preserving the level order."""
        if executor is None or len(level) == 1:
            return [self._read_directory(ctx, task) for task in level]
        futures = [executor.submit(self._read_directory, ctx, task) for task in level]
        return [future.result() for future in futures]

    @staticmethod
    def _flatten(listings: dict[str, Listing], root_task: _DirectoryTask) -> list[FileInfo]:
        """
        Emit entries depth-first in pre-order.

        Directory entries are sorted by name, so the output order is
        deterministic for an unchanged tree and the same in both modes.
        """
        entries: list[FileInfo] = []
        stack = [iter(listings.get(root_task.path, ()))]

        while stack:
            try:
                info, child = next(stack[-1])
            except StopIteration:
                stack.pop()
                continue

            entries.append(info)
            if child is not None:
                stack.append(iter(listings.get(child.path, ())))

        return entries

    def _read_directory(
        self, ctx: _ScanContext, task: _DirectoryTask
    ) -> Listing:
        """
        Read one directory and build entries for its surviving children.

        Args:
            ctx: Scan context
            task: Directory to read

        Returns:
            (FileInfo, subdirectory task or None) pairs in name order; the task
            is set for children that should be descended into
        """
        ctx.check_cancelled()

        try:
            with os.scandir(task.path) as it:
                raw_entries = sorted(it, key=lambda e: e.name)
        except PermissionError as e:
            logger.debug(f"Permission denied accessing directory: {task.path} - {e}")
            return []
        except OSError as e:
            logger.debug(f"Error accessing directory: {task.path} - {e}")
            return []

        config = ctx.config
        child_depth = task.depth + 1
        can_descend = config.max_depth is None or child_depth < config.max_depth

        results: Listing = []
        for entry in raw_entries:
            rel_path = os.path.join(task.rel_path, entry.name) if task.rel_path else entry.name

            if self._matches_patterns(config, entry.name, rel_path):
                logger.debug(f"Ignoring: {entry.path}")
                continue

            try:
                kind = _entry_kind(entry)
                st = entry.stat(follow_symlinks=config.follow_links)
            except OSError as e:
                # Dangling link, permission denied or deleted mid-scan
                logger.debug(f"Skipping unreadable entry {entry.path}: {e}")
                continue

            info = _to_file_info(entry.path, entry.name, st)

            if ctx.gitignore is not None and gitignore_matches(ctx.gitignore, rel_path, info.is_dir):
                logger.debug(f"Ignoring (gitignore): {entry.path}")
                continue

            if (
                not info.is_dir
                and ctx.ignore_filter is not None
                and ctx.ignore_filter.should_exclude(rel_path, info.size)
            ):
                logger.debug(f"Filtered: {entry.path}")
                continue

            child: _DirectoryTask | None = None
            # Without follow_links a symlink was stat-ed as itself, so is_dir is
            # only True here for followed links to directories
            descend = kind is EntryKind.DIRECTORY or (kind is EntryKind.SYMLINK and info.is_dir)
            if descend and can_descend:
                child = self._child_task(
                    ctx, entry, rel_path, child_depth, via_link=kind is EntryKind.SYMLINK
                )
                if child is None:
                    continue

            results.append((info, child))

        return results

    def _child_task(
        self,
        ctx: _ScanContext,
        entry: os.DirEntry,
        rel_path: str,
        depth: int,
        via_link: bool,
    ) -> _DirectoryTask | None:
        """
        Build the task for a subdirectory, or None if it cannot be read.

        With follow_links the task carries the directory's inode key for the
        visited guard; without link following a plain directory tree has no
        aliases, so no key is needed.
        """
        if not ctx.config.follow_links:
            return _DirectoryTask(path=entry.path, rel_path=rel_path, depth=depth)

        try:
            # os.stat rather than entry.stat: DirEntry leaves st_ino at 0 on Windows
            st = os.stat(entry.path)
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {entry.path}: {e}")
            return None

        return _DirectoryTask(
            path=entry.path,
            rel_path=rel_path,
            depth=depth,
            key=(st.st_dev, st.st_ino),
            via_link=via_link,
        )

    @staticmethod
    def _matches_patterns(config: ScanConfig, name: str, rel_path: str) -> bool:
        """Match ignore patterns against the entry name and its relative path."""
        if not config.ignore_patterns:
            return False
        return matches_ignore_pattern(
            name,
            config.ignore_patterns,
            case_sensitive=config.case_sensitive,
            match_segments=config.match_segments,
        ) or matches_ignore_pattern(
            rel_path,
            config.ignore_patterns,
            case_sensitive=config.case_sensitive,
            match_segments=config.match_segments,
        )


def scan_directory(
    config: ScanConfig | None = None, cancellation: CancellationToken | None = None
) -> ScanResult:
    """Scan with a fresh DirectoryScanner (default config scans '.')."""
    return DirectoryScanner().scan(config or ScanConfig(), cancellation)
