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
Tests for mount-table parsing and volume resolution.
"""

from unittest.mock import patch

from cellar_doctor.core.exceptions import ExternalToolTimeout
from cellar_doctor.core.models import Volume
from cellar_doctor.core.volumes import (
    NOT_FOUND,
    DfMountFacility,
    VolumeResolver,
    parse_mount_lines,
    resolve_volume,
)

DF_OUTPUT = """\
Filesystem    512-blocks      Used Available Capacity  Mounted on
/dev/disk1s1   976490576 234567890 700000000    26%    /
devfs                381       381         0   100%    /dev
/dev/disk2s1  1953525168 100000000 1853525168     6%    /Volumes/My Data
map auto_home          0         0         0   100%    /System/Volumes/Data/home
"""


class TestParseMountLines:
    """Test ``df -P`` parsing."""

    def test_parses_mount_points_in_order(self):
        volumes = parse_mount_lines(DF_OUTPUT)
        assert [v.mount_point for v in volumes] == ["/", "/dev", "/Volumes/My Data", "/System/Volumes/Data/home"]

    def test_device_with_spaces(self):
        volumes = parse_mount_lines(DF_OUTPUT)
        assert volumes[3] == Volume(device="map auto_home", mount_point="/System/Volumes/Data/home")

    def test_header_and_noise_skipped(self):
        assert parse_mount_lines("Filesystem 512-blocks Used Available Capacity Mounted on\n\ngarbage\n") == []


class TestVolumeResolver:
    """Test volume identity by index in one mount-table snapshot."""

    def test_two_volumes_get_distinct_indices(self, fake_df):
        facility = fake_df([("/dev/disk1", "/"), ("/dev/disk2", "/Volumes/data")])
        resolver = VolumeResolver(facility)

        assert resolver.volume_of("/Volumes/data/x") == 1
        assert resolver.volume_of("/tmp/x") == 0

    def test_paths_under_same_mount_point_match(self, fake_df):
        facility = fake_df([("/dev/disk1", "/"), ("/dev/disk2", "/Volumes/data")])
        resolver = VolumeResolver(facility)

        assert resolver.volume_of("/Volumes/data/a") == resolver.volume_of("/Volumes/data/b/c")
        assert resolver.same_volume("/Volumes/data/a", "/Volumes/data/b/c") is True
        assert resolver.same_volume("/Volumes/data/a", "/usr") is False

    def test_nonexistent_path_is_not_found(self, fake_df):
        facility = fake_df(nonexistent=["/no/such/path"])
        resolver = VolumeResolver(facility)

        assert resolver.volume_of("/no/such/path") == NOT_FOUND
        assert resolver.same_volume("/no/such/path", "/") is None

    def test_unavailable_facility_is_not_found(self, fake_df):
        resolver = VolumeResolver(fake_df(unavailable=True))

        assert resolver.table == []
        assert resolver.volume_of("/") == NOT_FOUND

    def test_mount_missing_from_snapshot_is_not_found(self, fake_df):
        facility = fake_df([("/dev/disk1", "/")])
        resolver = VolumeResolver(facility)
        # Mounted after the snapshot was taken
        facility.mounts.append(("/dev/disk9", "/Volumes/late"))

        assert resolver.volume_of("/Volumes/late/file") == NOT_FOUND

    def test_snapshot_taken_once(self, fake_df):
        facility = fake_df([("/dev/disk1", "/"), ("/dev/disk2", "/Volumes/data")])
        resolver = VolumeResolver(facility)
        resolver.volume_of("/a")
        resolver.volume_of("/Volumes/data/b")

        assert facility.calls == [None, "/a", "/Volumes/data/b"]

    def test_mount_table_is_fresh(self, fake_df):
        facility = fake_df([("/dev/disk1", "/")])
        resolver = VolumeResolver(facility)
        facility.mounts.append(("/dev/disk2", "/Volumes/data"))

        assert [v.mount_point for v in resolver.mount_table()] == ["/", "/Volumes/data"]
        assert [v.mount_point for v in resolver.table] == ["/"]

    def test_resolve_volume(self, fake_df):
        facility = fake_df([("/dev/disk1", "/"), ("/dev/disk2", "/Volumes/data")])
        assert resolve_volume("/Volumes/data/x", facility) == 1


class TestDfMountFacility:
    """Test the real facility's command line and timeout handling."""

    def test_runs_df_posix(self):
        with patch("cellar_doctor.core.volumes.run_external", return_value=DF_OUTPUT) as mock_run:
            DfMountFacility(timeout=3.0).list_mounts("/tmp")

        mock_run.assert_called_once_with(["/bin/df", "-P", "/tmp"], timeout=3.0)

    def test_timeout_degrades_to_not_found(self):
        with patch(
            "cellar_doctor.core.volumes.run_external",
            side_effect=ExternalToolTimeout(["/bin/df", "-P"], 3.0),
        ):
            resolver = VolumeResolver(DfMountFacility(timeout=3.0))
            assert resolver.volume_of("/tmp") == NOT_FOUND
