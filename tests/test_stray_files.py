# Copyright 2026 Cisco Systems, Inc. and its affiliates
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0


"""
Tests for the whitelist-filtered stray-file scan.
"""

from pathlib import Path

from cellar_doctor.core.stray_files import scan_stray_files


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("")
    return path


class TestScanStrayFiles:
    """Test scan_stray_files."""

    def test_only_unlisted_files_reported(self, tmp_path):
        _touch(tmp_path / "libfoo.dylib")
        bar = _touch(tmp_path / "libbar.dylib")

        assert scan_stray_files(tmp_path, "*.dylib", ["libfoo.dylib"]) == [bar]

    def test_everything_whitelisted_is_empty(self, tmp_path):
        _touch(tmp_path / "libfuse.2.dylib")
        _touch(tmp_path / "libntfs-3g.88.dylib")

        assert scan_stray_files(tmp_path, "*.dylib", ["libfuse.2.dylib", "libntfs-3g.*.dylib"]) == []

    def test_missing_root_is_empty(self, tmp_path):
        assert scan_stray_files(tmp_path / "nope", "*.dylib") == []

    def test_symlinks_excluded(self, tmp_path):
        real = _touch(tmp_path / "real" / "libreal.dylib")
        lib = tmp_path / "lib"
        lib.mkdir()
        (lib / "liblinked.dylib").symlink_to(real)

        assert scan_stray_files(lib, "*.dylib") == []

    def test_directories_excluded(self, tmp_path):
        (tmp_path / "weird.dylib").mkdir()

        assert scan_stray_files(tmp_path, "*.dylib") == []

    def test_recursive_pattern_and_whitelist(self, tmp_path):
        _touch(tmp_path / "fuse.h")
        _touch(tmp_path / "fuse" / "nested" / "fuse_common.h")
        stray = _touch(tmp_path / "openssl" / "ssl.h")
        top = _touch(tmp_path / "zlib.h")

        result = scan_stray_files(tmp_path, "**/*.h", ["fuse.h", "fuse/**/*.h"])
        assert result == sorted([stray, top])

    def test_non_matching_files_ignored(self, tmp_path):
        _touch(tmp_path / "libfoo.a")
        _touch(tmp_path / "README")

        assert scan_stray_files(tmp_path, "*.dylib") == []

    def test_accepts_string_root(self, tmp_path):
        bar = _touch(tmp_path / "libbar.la")

        assert scan_stray_files(str(tmp_path), "*.la") == [bar]

    def test_hidden_files_not_reported(self, tmp_path):
        _touch(tmp_path / ".foo.dylib")
        _touch(tmp_path / ".cache" / "nested" / "libcached.h")
        bar = _touch(tmp_path / "libbar.dylib")

        assert scan_stray_files(tmp_path, "*.dylib") == [bar]
        assert scan_stray_files(tmp_path, "**/*.h") == []

    def test_pattern_naming_dotfiles_matches_them(self, tmp_path):
        hidden = _touch(tmp_path / ".foo.dylib")

        assert scan_stray_files(tmp_path, ".*.dylib") == [hidden]
