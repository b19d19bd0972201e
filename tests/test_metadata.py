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
Tests for package metadata providers.
"""

import json

import pytest

from cellar_doctor.core.exceptions import PackageUnavailableError
from cellar_doctor.core.metadata import CellarMetadataProvider, InMemoryMetadataProvider
from cellar_doctor.core.models import DependencyKind


@pytest.fixture
def cellar(tmp_path):
    """A Cellar with a few racks and install receipts."""
    root = tmp_path / "Cellar"

    def _keg(name, version, receipt=None):
        keg = root / name / version
        keg.mkdir(parents=True)
        if receipt is not None:
            (keg / "INSTALL_RECEIPT.json").write_text(json.dumps(receipt))
        return keg

    _keg("wget", "1.20", {"dependencies": ["openssl"]})
    _keg(
        "wget",
        "1.21",
        {
            "dependencies": [
                "openssl",
                {"name": "libidn2", "kind": "recommended"},
                {"name": "pod2man", "kind": "build"},
                {"name": "bogus", "kind": "sometimes"},
                42,
            ],
            "used_options": ["without-libidn2"],
        },
    )
    _keg("openssl", "3.0", {"keg_only": True, "full_name": "openssl@3"})
    (root / "empty-rack").mkdir()
    (root / ".DS_Store").mkdir()
    return root


class TestInMemoryMetadataProvider:
    """Test the in-memory provider."""

    def test_resolve_by_name_and_full_name(self, make_package):
        pkg = make_package("foo", full_name="me/tap/foo")
        provider = InMemoryMetadataProvider([pkg])

        assert provider.resolve("foo") is pkg
        assert provider.resolve("me/tap/foo") is pkg

    def test_unknown_name_raises(self):
        with pytest.raises(PackageUnavailableError) as exc_info:
            InMemoryMetadataProvider().resolve("ghost")
        assert exc_info.value.name == "ghost"

    def test_installed_packages_sorted_and_unique(self, make_package):
        provider = InMemoryMetadataProvider(
            [
                make_package("zsh", full_name="me/tap/zsh"),
                make_package("bash"),
                make_package("gone", installed=False),
            ]
        )
        assert [p.name for p in provider.installed_packages()] == ["bash", "zsh"]


class TestCellarMetadataProvider:
    """Test reading racks and receipts from disk."""

    def test_racks_skip_hidden(self, cellar):
        provider = CellarMetadataProvider(cellar)
        assert [r.name for r in provider.racks()] == ["empty-rack", "openssl", "wget"]

    def test_installed_packages_skip_empty_racks(self, cellar):
        provider = CellarMetadataProvider(cellar)
        assert [p.name for p in provider.installed_packages()] == ["openssl", "wget"]

    def test_receipt_read_from_newest_version(self, cellar):
        wget = CellarMetadataProvider(cellar).resolve("wget")

        assert [p.name for p in wget.installed_prefixes] == ["1.20", "1.21"]
        assert [(e.name, e.kind) for e in wget.dependencies] == [
            ("openssl", DependencyKind.REQUIRED),
            ("libidn2", DependencyKind.RECOMMENDED),
            ("pod2man", DependencyKind.BUILD),
        ]
        assert wget.build_options.without_option("libidn2")

    def test_receipt_read_from_highest_version_not_lexical_last(self, cellar):
        for version, options in (("1.9", []), ("1.10", ["with-bar"])):
            keg = cellar / "foo" / version
            keg.mkdir(parents=True)
            (keg / "INSTALL_RECEIPT.json").write_text(json.dumps({"used_options": options}))

        foo = CellarMetadataProvider(cellar).resolve("foo")

        assert [p.name for p in foo.installed_prefixes] == ["1.9", "1.10"]
        assert foo.build_options.used_options == frozenset({"with-bar"})

    def test_unparseable_version_sorts_before_real_versions(self, cellar):
        (cellar / "bar" / "HEAD-abc123").mkdir(parents=True)
        (cellar / "bar" / "2.0").mkdir(parents=True)

        bar = CellarMetadataProvider(cellar).resolve("bar")
        assert [p.name for p in bar.installed_prefixes] == ["HEAD-abc123", "2.0"]

    def test_keg_only_and_full_name(self, cellar):
        openssl = CellarMetadataProvider(cellar).resolve("openssl")
        assert openssl.keg_only
        assert openssl.full_name == "openssl@3"

    def test_tap_qualified_name(self, cellar):
        assert CellarMetadataProvider(cellar).resolve("someone/tap/wget").name == "wget"

    def test_unknown_rack_raises(self, cellar):
        with pytest.raises(PackageUnavailableError):
            CellarMetadataProvider(cellar).resolve("ghost")

    def test_empty_rack_is_not_installed(self, cellar):
        assert not CellarMetadataProvider(cellar).resolve("empty-rack").any_version_installed

    def test_unreadable_receipt_ignored(self, cellar):
        keg = cellar / "broken" / "1.0"
        keg.mkdir(parents=True)
        (keg / "INSTALL_RECEIPT.json").write_text("{not json")

        broken = CellarMetadataProvider(cellar).resolve("broken")
        assert broken.dependencies == ()
        assert broken.any_version_installed

    def test_missing_cellar(self, tmp_path):
        provider = CellarMetadataProvider(tmp_path / "nope")
        assert provider.racks() == []
        assert provider.installed_packages() == []
