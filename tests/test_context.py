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
Tests for the per-run context.
"""

from cellar_doctor.core.context import RunContext
from cellar_doctor.core.doctor_policy import DoctorPolicy
from cellar_doctor.core.metadata import CellarMetadataProvider
from cellar_doctor.core.volumes import DfMountFacility


class TestRunContextDefaults:
    """Test defaults for collaborators and shared fields."""

    def test_path_flags_start_false(self, make_context):
        ctx = make_context()
        assert ctx.seen_prefix_bin is False
        assert ctx.seen_prefix_sbin is False

    def test_default_collaborators(self, make_config):
        config = make_config()
        ctx = RunContext(config=config, policy=DoctorPolicy.default())

        assert isinstance(ctx.provider, CellarMetadataProvider)
        assert ctx.provider.cellar == config.cellar
        assert isinstance(ctx.mount_facility, DfMountFacility)
        assert ctx.mount_facility.timeout == config.external_timeout_seconds

    def test_scratch_space(self, make_context):
        ctx = make_context()
        assert ctx.get("missing", "fallback") == "fallback"
        ctx.set("key", 42)
        assert ctx.get("key") == 42

    def test_fresh_context_per_run(self, make_context):
        first = make_context()
        first.seen_prefix_bin = True
        first.set("key", 1)

        second = make_context()
        assert second.seen_prefix_bin is False
        assert second.get("key") is None


class TestRunContextEnvironment:
    """Test environment accessors."""

    def test_paths_from_environ(self, make_context):
        ctx = make_context(environ={"PATH": "/a::/b/"})
        assert ctx.paths == ["/a", "/b/"]

    def test_which_uses_run_path(self, make_context, make_executable, tmp_path):
        tool = make_executable(tmp_path / "tools", "frobnicate")
        ctx = make_context(environ={"PATH": str(tmp_path / "tools")})

        assert ctx.which("frobnicate") == tool
        assert ctx.which("absent-tool") is None


class TestRunContextExternalCommands:
    """Test bounded external command execution."""

    def test_run_passes_timeout_and_environment(self, make_context):
        ctx = make_context(responses={("git", "--version"): "git version 2.40.0\n"}, environ={"LANG": "C"})

        assert ctx.run(["git", "--version"], cwd="/repo") == "git version 2.40.0\n"
        call = ctx.command_runner.calls[0]
        assert call["timeout"] == 5.0
        assert call["cwd"] == "/repo"

    def test_policy_timeout_overrides_config(self, make_context):
        policy = DoctorPolicy.default()
        policy.execution.external_timeout_seconds = 1.5
        ctx = make_context(policy=policy)

        assert ctx.external_timeout == 1.5


class TestRunContextCollaborators:
    """Test analyzer and resolver accessors."""

    def test_dependency_analyzer_shared_within_run(self, make_context):
        ctx = make_context()
        assert ctx.dependency_analyzer() is ctx.dependency_analyzer()

    def test_volume_resolver_captures_fresh_table(self, make_context, fake_df):
        facility = fake_df()
        ctx = make_context(mount_facility=facility)

        ctx.volume_resolver()
        ctx.volume_resolver()
        assert facility.calls == [None, None]
