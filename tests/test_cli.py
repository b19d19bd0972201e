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
Tests for the command-line interface.
"""

import json

import pytest

from cellar_doctor.cli.cli import main
from cellar_doctor.core.doctor_policy import DoctorPolicy


@pytest.fixture
def doctor_env(tmp_path, monkeypatch):
    """Point every location at *tmp_path*."""
    prefix = tmp_path / "prefix"
    (prefix / "Cellar").mkdir(parents=True)
    monkeypatch.setenv("CELLAR_DOCTOR_PREFIX", str(prefix))
    monkeypatch.setenv("CELLAR_DOCTOR_TEMP", str(tmp_path))
    monkeypatch.setenv("TMPDIR", str(tmp_path))
    return prefix


def _keg(cellar, name, version, dependencies=()):
    keg = cellar / name / version
    keg.mkdir(parents=True)
    (keg / "INSTALL_RECEIPT.json").write_text(json.dumps({"dependencies": list(dependencies)}))


class TestRunCommand:
    """Test ``cellar-doctor run``."""

    def test_clean_summary(self, doctor_env, capsys):
        assert main(["run", "check_tmpdir"]) == 0
        assert "Your system is ready to brew." in capsys.readouterr().out

    def test_warning_summary(self, doctor_env, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("TMPDIR", str(tmp_path / "gone"))

        assert main(["run", "check_tmpdir"]) == 1

        out = capsys.readouterr().out
        assert "Please note that these warnings are just used to help diagnose problems." in out
        assert "Warning: TMPDIR" in out

    def test_json_output(self, doctor_env, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("TMPDIR", str(tmp_path / "gone"))

        main(["run", "check_tmpdir", "check_dyld_vars", "--format", "json"])

        data = json.loads(capsys.readouterr().out)
        assert data["checks_run"] == ["check_dyld_vars", "check_tmpdir"]
        assert [a["check"] for a in data["advisories"]] == ["check_tmpdir"]

    def test_markdown_to_file(self, doctor_env, tmp_path, capsys):
        out = tmp_path / "doctor.md"

        assert main(["run", "check_tmpdir", "--format", "markdown", "-o", str(out)]) == 0

        assert out.read_text().startswith("# Cellar Doctor Report")
        assert f"Report saved to: {out}" in capsys.readouterr().out

    def test_flags_after_subcommand(self, doctor_env, capsys):
        assert main(["run", "--verbose", "check_tmpdir"]) == 0

    def test_env_file(self, doctor_env, tmp_path, capsys):
        env_file = tmp_path / "doctor.env"
        env_file.write_text(f"TMPDIR={tmp_path / 'from-file'}\n")

        assert main(["run", "--env-file", str(env_file), "check_tmpdir", "--format", "json"]) == 1
        advisories = json.loads(capsys.readouterr().out)["advisories"]
        assert "from-file" in advisories[0]["message"]

    def test_unknown_check(self, doctor_env, capsys):
        assert main(["run", "check_nope"]) == 1
        assert "Unknown check(s): check_nope" in capsys.readouterr().err

    def test_list_checks_respects_policy(self, doctor_env, tmp_path, capsys):
        policy = tmp_path / "policy.yaml"
        policy.write_text("disabled_checks: [check_for_git]\n")

        assert main(["run", "--list-checks", "--policy", str(policy)]) == 0

        out = capsys.readouterr().out
        assert "check_tmpdir" in out
        assert "check_for_git " not in out

    def test_missing_policy_file(self, doctor_env, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["run", "--policy", str(tmp_path / "nope.yaml")])
        assert exc_info.value.code == 1
        assert "Policy file not found" in capsys.readouterr().err


class TestMissingCommand:
    """Test ``cellar-doctor missing``."""

    def test_reports_missing(self, doctor_env, capsys):
        _keg(doctor_env / "Cellar", "wget", "1.21", ["openssl", "libidn2"])
        _keg(doctor_env / "Cellar", "libidn2", "2.3")

        assert main(["missing"]) == 1
        assert capsys.readouterr().out == "wget: openssl\n"

    def test_nothing_missing(self, doctor_env, capsys):
        _keg(doctor_env / "Cellar", "jq", "1.7")
        assert main(["missing", "jq"]) == 0
        assert capsys.readouterr().out == ""

    def test_unknown_package(self, doctor_env, capsys):
        assert main(["missing", "ghost"]) == 1
        assert "ghost" in capsys.readouterr().err


class TestOtherCommands:
    """Test list-checks, generate-policy and the bare entry point."""

    def test_list_checks(self, capsys):
        assert main(["list-checks"]) == 0
        out = capsys.readouterr().out
        assert "\npath:\n" in out
        assert "  check_user_path_1" in out
        assert "\npython:\n" in out

    def test_generate_policy(self, tmp_path, capsys):
        out = tmp_path / "generated.yaml"

        assert main(["generate-policy", "-o", str(out)]) == 0

        assert DoctorPolicy.from_yaml(out).path.system_bin_dir == "/usr/bin"
        assert f"cellar-doctor run --policy {out}" in capsys.readouterr().out

    def test_no_command(self, capsys):
        assert main([]) == 1
