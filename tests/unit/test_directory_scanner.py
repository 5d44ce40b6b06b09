"""
Unit tests for DirectoryScanner edge cases.

Covers missing roots, the root entry, depth zero, symlink handling and the
visited directory guard, unreadable directories, .gitignore support,
size/extension filtering and cancellation.
"""

import os
import sys
from pathlib import Path

import pytest

from repolens.core.errors import PathNotFoundError, ScanCancelledError
from repolens.core.file_scanner import (
    CancellationToken,
    DirectoryScanner,
    ScanConfig,
    scan_directory,
)
from repolens.core.ignore_filter import FilterConfig

symlinks_unsupported = pytest.mark.skipif(
    sys.platform == "win32", reason="Symlink tests require admin privileges on Windows"
)


def _names(result) -> set[str]:
    return {f.name for f in result.files}


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """
    root/
        main.rs       (1000 bytes)
        lib.rs        (2000 bytes)
        src/
            app.py    (400 bytes)
            deep/
                leaf.md (10 bytes)
    """
    root = tmp_path / "sample"
    (root / "src" / "deep").mkdir(parents=True)
    (root / "main.rs").write_bytes(b"a" * 1000)
    (root / "lib.rs").write_bytes(b"b" * 2000)
    (root / "src" / "app.py").write_bytes(b"c" * 400)
    (root / "src" / "deep" / "leaf.md").write_bytes(b"d" * 10)
    return root


class TestScanRoot:
    def test_missing_root_raises(self, tmp_path):
        missing = tmp_path / "does-not-exist"

        with pytest.raises(PathNotFoundError) as exc_info:
            DirectoryScanner().scan(ScanConfig(path=str(missing)))

        assert exc_info.value.path == str(missing)
        assert "does-not-exist" in str(exc_info.value)

    def test_root_reported_as_directory(self, sample_tree):
        result = DirectoryScanner().scan(ScanConfig(path=str(sample_tree)))

        root_entries = [f for f in result.files if f.path == str(sample_tree)]
        assert len(root_entries) == 1
        assert root_entries[0].is_dir
        assert root_entries[0].name == "sample"
        assert root_entries[0].extension == ""

    def test_counts_and_sizes(self, sample_tree):
        result = DirectoryScanner().scan(ScanConfig(path=str(sample_tree)))

        assert result.file_count == 4
        # root, src, deep
        assert result.dir_count == 3
        assert result.total_size == 3410

    def test_max_depth_zero_returns_only_root(self, sample_tree):
        for parallel in (True, False):
            result = DirectoryScanner().scan(
                ScanConfig(path=str(sample_tree), max_depth=0, parallel=parallel)
            )

            assert len(result.files) == 1
            assert result.dir_count == 1
            assert result.file_count == 0
            assert result.total_size == 0

    def test_max_depth_one_stops_below_children(self, sample_tree):
        result = DirectoryScanner().scan(ScanConfig(path=str(sample_tree), max_depth=1))

        assert _names(result) == {"sample", "main.rs", "lib.rs", "src"}

    def test_file_root_yields_single_entry(self, sample_tree):
        target = sample_tree / "main.rs"

        result = DirectoryScanner().scan(ScanConfig(path=str(target)))

        assert result.file_count == 1
        assert result.dir_count == 0
        assert result.total_size == 1000
        assert result.files[0].extension == "rs"

    def test_empty_directory(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()

        result = DirectoryScanner().scan(ScanConfig(path=str(empty)))

        assert result.file_count == 0
        assert result.dir_count == 1

    def test_scan_directory_helper(self, sample_tree):
        result = scan_directory(ScanConfig(path=str(sample_tree), parallel=False))

        assert result.file_count == 4


class TestFileMetadata:
    def test_extension_and_timestamps(self, sample_tree):
        result = DirectoryScanner().scan(ScanConfig(path=str(sample_tree)))
        by_name = {f.name: f for f in result.files}

        assert by_name["app.py"].extension == "py"
        assert by_name["app.py"].size == 400
        assert by_name["app.py"].modified_time > 0
        assert by_name["app.py"].created_time >= 0
        assert by_name["src"].is_dir
        assert by_name["src"].extension == ""

    def test_dotfile_has_no_extension(self, tmp_path):
        (tmp_path / "proj").mkdir()
        (tmp_path / "proj" / ".gitignore").write_text("*.log\n")
        (tmp_path / "proj" / "archive.tar.gz").write_bytes(b"")

        result = DirectoryScanner().scan(ScanConfig(path=str(tmp_path / "proj"), ignore_patterns=()))
        by_name = {f.name: f for f in result.files}

        assert by_name[".gitignore"].extension == ""
        assert by_name["archive.tar.gz"].extension == "gz"


class TestIgnorePatterns:
    def test_default_patterns_skip_dependency_dirs(self, sample_tree):
        (sample_tree / "node_modules" / "lodash").mkdir(parents=True)
        (sample_tree / "node_modules" / "lodash" / "index.js").write_bytes(b"x" * 50)

        result = DirectoryScanner().scan(ScanConfig(path=str(sample_tree)))

        assert "node_modules" not in _names(result)
        assert "index.js" not in _names(result)
        assert result.file_count == 4

    def test_patterns_do_not_apply_to_root_prefix(self, tmp_path):
        # The root itself lives under a directory whose name contains 'tmp'
        root = tmp_path / "tmp_checkout"
        root.mkdir()
        (root / "main.go").write_bytes(b"x" * 5)

        result = DirectoryScanner().scan(ScanConfig(path=str(root)))

        assert "main.go" in _names(result)

    def test_segment_matching(self, tmp_path):
        root = tmp_path / "proj"
        (root / "layout").mkdir(parents=True)
        (root / "layout" / "page.html").write_bytes(b"x")
        (root / "out").mkdir()
        (root / "out" / "page.html").write_bytes(b"x")

        substring = DirectoryScanner().scan(ScanConfig(path=str(root), ignore_patterns=("out",)))
        segments = DirectoryScanner().scan(
            ScanConfig(path=str(root), ignore_patterns=("out",), match_segments=True)
        )

        assert "layout" not in _names(substring)
        assert "layout" in _names(segments)
        assert "out" not in _names(segments)

    def test_case_insensitive_matching(self, tmp_path):
        root = tmp_path / "proj"
        (root / "Build").mkdir(parents=True)
        (root / "Build" / "a.o").write_bytes(b"x")

        sensitive = DirectoryScanner().scan(ScanConfig(path=str(root)))
        insensitive = DirectoryScanner().scan(ScanConfig(path=str(root), case_sensitive=False))

        assert "Build" in _names(sensitive)
        assert "Build" not in _names(insensitive)


class TestGitignore:
    def test_root_gitignore_applied_when_enabled(self, tmp_path):
        root = tmp_path / "repo"
        (root / "logs").mkdir(parents=True)
        (root / "logs" / "a.log").write_text("x")
        (root / "keep.py").write_text("x")
        (root / "debug.log").write_text("x")
        (root / ".gitignore").write_text("# comment\n*.log\nlogs/\n")

        plain = DirectoryScanner().scan(ScanConfig(path=str(root)))
        filtered = DirectoryScanner().scan(ScanConfig(path=str(root), respect_gitignore=True))

        assert {"debug.log", "logs"} <= _names(plain)
        assert "debug.log" not in _names(filtered)
        assert "logs" not in _names(filtered)
        assert "a.log" not in _names(filtered)
        assert "keep.py" in _names(filtered)

    def test_missing_gitignore_is_not_an_error(self, sample_tree):
        result = DirectoryScanner().scan(ScanConfig(path=str(sample_tree), respect_gitignore=True))

        assert result.file_count == 4


class TestFilterConfig:
    def test_size_bounds_exclude_files_only(self, sample_tree):
        filter_config = FilterConfig.builder().patterns([]).min_size(500).max_size(1500).build()

        result = DirectoryScanner().scan(
            ScanConfig(path=str(sample_tree), filter_config=filter_config)
        )

        assert "main.rs" in _names(result)
        assert "lib.rs" not in _names(result)
        assert "app.py" not in _names(result)
        # Directories survive size rules and are still descended
        assert {"src", "deep"} <= _names(result)

    def test_extension_allow_list(self, sample_tree):
        filter_config = FilterConfig.builder().patterns([]).extensions([".rs"]).build()

        result = DirectoryScanner().scan(
            ScanConfig(path=str(sample_tree), filter_config=filter_config)
        )

        files = {f.name for f in result.files if not f.is_dir}
        assert files == {"main.rs", "lib.rs"}


@symlinks_unsupported
class TestSymlinks:
    def test_links_not_followed_by_default(self, sample_tree, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_bytes(b"x" * 7)
        os.symlink(outside, sample_tree / "linked")

        result = DirectoryScanner().scan(ScanConfig(path=str(sample_tree)))

        assert "linked" in _names(result)
        assert "secret.txt" not in _names(result)

    def test_links_followed_when_enabled(self, sample_tree, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_bytes(b"x" * 7)
        os.symlink(outside, sample_tree / "linked")

        for parallel in (True, False):
            result = DirectoryScanner().scan(
                ScanConfig(path=str(sample_tree), follow_links=True, parallel=parallel)
            )
            by_name = {f.name: f for f in result.files}

            assert by_name["linked"].is_dir
            assert "secret.txt" in by_name

    def test_cycle_terminates(self, sample_tree):
        # src/deep/back -> root
        os.symlink(sample_tree, sample_tree / "src" / "deep" / "back")

        sequential = DirectoryScanner().scan(
            ScanConfig(path=str(sample_tree), follow_links=True, parallel=False)
        )
        parallel = DirectoryScanner().scan(
            ScanConfig(path=str(sample_tree), follow_links=True, parallel=True)
        )

        # The looping link is reported but not descended
        assert "back" in _names(sequential)
        assert not any(os.sep + "back" + os.sep in f.path for f in sequential.files)
        assert sequential.file_count == 4
        assert [f.path for f in sequential.files] == [f.path for f in parallel.files]

    @pytest.mark.parametrize("parallel", [True, False])
    def test_aliased_directory_descended_once(self, tmp_path, parallel):
        root = tmp_path / "aliases"
        (root / "lib").mkdir(parents=True)
        (root / "lib" / "a.py").write_bytes(b"x" * 12)
        for i in range(3):
            os.symlink(root / "lib", root / f"alias{i}")

        result = DirectoryScanner().scan(
            ScanConfig(path=str(root), follow_links=True, parallel=parallel)
        )

        assert result.file_count == 1
        assert result.total_size == 12
        # root, lib and the three aliases
        assert result.dir_count == 5
        # A real directory wins over links at the same depth
        assert [f.path for f in result.files if f.name == "a.py"] == [
            str(root / "lib" / "a.py")
        ]

    def test_shallowest_alias_wins_in_both_modes(self, tmp_path):
        root = tmp_path / "nested"
        (root / "deep" / "er").mkdir(parents=True)
        (root / "deep" / "er" / "core").mkdir()
        (root / "deep" / "er" / "core" / "inner").mkdir()
        (root / "deep" / "er" / "core" / "inner" / "x.rs").write_bytes(b"x" * 3)
        os.symlink(root / "deep" / "er" / "core", root / "zlink")

        for max_depth in (None, 3):
            results = [
                DirectoryScanner().scan(
                    ScanConfig(
                        path=str(root), follow_links=True, parallel=parallel, max_depth=max_depth
                    )
                )
                for parallel in (False, True)
            ]

            assert [f.path for f in results[0].files] == [f.path for f in results[1].files]
            # core is descended through zlink (depth 1), so x.rs is at depth 3
            assert [f.path for f in results[0].files if f.name == "x.rs"] == [
                str(root / "zlink" / "inner" / "x.rs")
            ]

    @pytest.mark.parametrize("parallel", [True, False])
    def test_link_fan_out_stays_linear(self, tmp_path, parallel):
        # Each level links twice to the next one; without a visited guard the
        # single file would be reported 2**levels times
        root = tmp_path / "chain"
        levels = 12
        dirs = [root / f"level{i}" for i in range(levels + 1)]
        for d in dirs:
            d.mkdir(parents=True)
        (dirs[-1] / "leaf.txt").write_bytes(b"x")
        for i in range(levels):
            os.symlink(dirs[i + 1], dirs[i] / "left")
            os.symlink(dirs[i + 1], dirs[i] / "right")

        result = DirectoryScanner().scan(
            ScanConfig(path=str(root), follow_links=True, parallel=parallel)
        )

        assert result.file_count == 1
        assert result.total_size == 1

    def test_dangling_link_dropped_when_following(self, sample_tree):
        os.symlink(sample_tree / "missing-target", sample_tree / "dangling")

        followed = DirectoryScanner().scan(ScanConfig(path=str(sample_tree), follow_links=True))
        unfollowed = DirectoryScanner().scan(ScanConfig(path=str(sample_tree)))

        assert "dangling" not in _names(followed)
        assert "dangling" in _names(unfollowed)


class TestUnreadableDirectories:
    @pytest.fixture
    def locked_scandir(self, monkeypatch):
        """Make os.scandir refuse any directory named 'locked'."""
        real_scandir = os.scandir

        def scandir(path):
            if not isinstance(path, int) and os.path.basename(os.fspath(path)) == "locked":
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_scandir(path)

        monkeypatch.setattr("repolens.core.file_scanner.scanner.os.scandir", scandir)

    def test_permission_denied_directory_is_skipped(self, sample_tree, locked_scandir):
        (sample_tree / "src" / "locked").mkdir()
        (sample_tree / "src" / "locked" / "hidden.py").write_bytes(b"x" * 99)

        results = [
            DirectoryScanner().scan(ScanConfig(path=str(sample_tree), parallel=parallel))
            for parallel in (False, True)
        ]

        for result in results:
            names = _names(result)
            # The directory itself is listed by its parent, its contents are not
            assert "locked" in names
            assert "hidden.py" not in names
            assert {"main.rs", "lib.rs", "app.py", "leaf.md"} <= names
            assert result.file_count == 4
            assert result.total_size == 3410
        assert [f.path for f in results[0].files] == [f.path for f in results[1].files]

    def test_unreadable_root_directory_yields_only_root(self, tmp_path, locked_scandir):
        root = tmp_path / "locked"
        root.mkdir()
        (root / "a.py").write_bytes(b"x")

        result = DirectoryScanner().scan(ScanConfig(path=str(root)))

        assert len(result.files) == 1
        assert result.dir_count == 1


class TestCancellation:
    @pytest.mark.parametrize("parallel", [True, False])
    def test_cancelled_token_raises(self, sample_tree, parallel):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(ScanCancelledError) as exc_info:
            DirectoryScanner().scan(ScanConfig(path=str(sample_tree), parallel=parallel), token)

        assert exc_info.value.path == str(sample_tree)

    def test_uncancelled_token_is_harmless(self, sample_tree):
        token = CancellationToken()

        result = DirectoryScanner().scan(ScanConfig(path=str(sample_tree)), token)

        assert not token.cancelled
        assert result.file_count == 4


class TestScanConfigValidation:
    def test_negative_depth_rejected(self):
        with pytest.raises(ValueError):
            ScanConfig(max_depth=-1)

    def test_zero_workers_rejected(self):
        with pytest.raises(ValueError):
            ScanConfig(max_workers=0)

    def test_patterns_coerced_to_tuple(self):
        config = ScanConfig(ignore_patterns=["a", "b"])

        assert config.ignore_patterns == ("a", "b")
