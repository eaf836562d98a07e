"""
info.json 생성과 .pak/.zip 처리 테스트
"""

import asyncio
import hashlib
import json
import logging
import zipfile
from datetime import datetime

import pytest

from conftest import MOD_UUID, FakePackager, write_file
from mod_packer.errors import WorkspaceInUseError
from mod_packer.packaging import (
    ManifestBuilder,
    PackageOptions,
    PakArchiver,
    Workspace,
    compute_archive_hash,
)
from mod_packer.parsers.meta import build_meta_lsx


class TestComputeArchiveHash:
    def test_concatenated_md5(self, tmp_path):
        a = write_file(tmp_path / "a.pak", "hello ")
        b = write_file(tmp_path / "b.pak", "world")

        assert compute_archive_hash([a, b]) == hashlib.md5(b"hello world").hexdigest()

    def test_reproducible(self, tmp_path):
        a = write_file(tmp_path / "a.pak", "x" * 3_000_000)

        assert compute_archive_hash([a]) == compute_archive_hash([a])

    def test_empty(self):
        assert compute_archive_hash([]) == hashlib.md5(b"").hexdigest()


class TestManifestBuilder:
    """ManifestBuilder 테스트"""

    def test_generate_info_json(self, tmp_path, workspace):
        workspace.ensure()
        write_file(workspace.archive_path("B"), "bbb")
        write_file(workspace.archive_path("A"), "aaa")
        meta = write_file(tmp_path / "meta.lsx", build_meta_lsx("Cool", module_uuid=MOD_UUID))
        created = datetime(2024, 5, 6, 7, 8, 9)

        path = asyncio.run(ManifestBuilder(workspace).generate_info_json({"g": [meta]}, created))

        assert path == workspace.manifest_path
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["MD5"] == hashlib.md5(b"aaabbb").hexdigest()
        assert len(data["Mods"]) == 1
        mod = data["Mods"][0]
        assert mod["Name"] == "Cool"
        assert mod["UUID"] == MOD_UUID
        assert mod["Group"] == "g"
        assert mod["Created"].startswith("2024-05-06T07:08:09")

    def test_logs_semantic_version(self, tmp_path, workspace, caplog):
        workspace.ensure()
        meta = write_file(tmp_path / "meta.lsx", build_meta_lsx("Cool"))

        with caplog.at_level(logging.INFO, logger="mod_packer.packaging.manifest"):
            asyncio.run(ManifestBuilder(workspace).collect_metadata({"g": [meta]}))

        assert "Cool (버전 1.0.0.0)" in caplog.text

    def test_no_mods(self, workspace):
        workspace.ensure()

        assert asyncio.run(ManifestBuilder(workspace).generate_info_json({})) is None
        assert not workspace.manifest_path.exists()

    def test_shared_created_timestamp(self, tmp_path, workspace):
        workspace.ensure()
        first = write_file(tmp_path / "1" / "meta.lsx", build_meta_lsx("One"))
        second = write_file(tmp_path / "2" / "meta.lsx", build_meta_lsx("Two"))

        mods = asyncio.run(
            ManifestBuilder(workspace).collect_metadata({"a": [first], "b": [second]})
        )

        assert [m.name for m in mods] == ["One", "Two"]
        assert mods[0].created == mods[1].created


class TestPakArchiver:
    """PakArchiver 테스트"""

    def test_pack_mod_passes_options(self, tmp_path, workspace):
        build = write_file(tmp_path / "build" / "Public" / "x.txt", "x").parent.parent
        packager = FakePackager()
        archiver = PakArchiver(workspace, packager, PackageOptions(priority=30))

        archive = archiver.pack_mod(build, workspace.archive_path("Mod"))

        assert archive == workspace.archive_path("Mod")
        assert packager.options[0].priority == 30
        assert packager.snapshots["Mod.pak"] == ["Public/x.txt"]

    def test_pack_mod_failure(self, tmp_path, workspace):
        archiver = PakArchiver(workspace, FakePackager(fail=True))

        assert archiver.pack_mod(tmp_path, workspace.archive_path("Mod")) is None

    def test_create_zip_next_to_dropped_folder(self, tmp_path, workspace):
        workspace.ensure()
        write_file(workspace.archive_path("Mod"), "pak")
        write_file(workspace.manifest_path, "{}")
        dropped = tmp_path / "drops" / "Mod"
        dropped.mkdir(parents=True)
        write_file(tmp_path / "drops" / "Mod.zip", "stale")

        zip_path = PakArchiver(workspace, FakePackager()).create_zip(dropped, "Mod")

        assert zip_path == tmp_path / "drops" / "Mod.zip"
        with zipfile.ZipFile(zip_path) as zipf:
            assert sorted(zipf.namelist()) == ["Mod.pak", "info.json"]

    def test_install_to_mods_replaces(self, tmp_path, workspace):
        workspace.ensure()
        archive = write_file(workspace.archive_path("Mod"), "new")
        mods_folder = tmp_path / "Mods"
        write_file(mods_folder / "Mod.pak", "old")

        target = PakArchiver(workspace, FakePackager()).install_to_mods(archive, mods_folder)

        assert target == mods_folder / "Mod.pak"
        assert target.read_text(encoding="utf-8") == "new"
        assert not archive.exists()

    def test_install_without_mods_folder(self, tmp_path, workspace):
        workspace.ensure()
        archive = write_file(workspace.archive_path("Mod"), "pak")

        assert PakArchiver(workspace, FakePackager()).install_to_mods(archive, tmp_path / "missing") is None
        assert archive.exists()


class TestWorkspace:
    """Workspace 테스트"""

    def test_clear_staging_keeps_archives(self, workspace):
        workspace.ensure()
        write_file(workspace.archive_path("Mod"), "pak")
        write_file(workspace.mod_dir("Mod") / "file.txt", "x")
        write_file(workspace.manifest_path, "{}")

        workspace.clear_staging()

        assert [p.name for p in workspace.root.iterdir()] == ["Mod.pak"]

    def test_clean(self, workspace):
        workspace.ensure()
        write_file(workspace.mod_dir("Mod") / "file.txt", "x")

        workspace.clean()

        assert workspace.is_empty()

    def test_archives_sorted(self, workspace):
        workspace.ensure()
        for name in ("b", "a", "c"):
            write_file(workspace.archive_path(name), name)
        write_file(workspace.root / "notes.txt", "")

        assert [p.name for p in workspace.archives()] == ["a.pak", "b.pak", "c.pak"]

    def test_claim_is_exclusive(self, tmp_path):
        first = Workspace(tmp_path / "ws")
        second = Workspace(tmp_path / "ws")

        with first.claim():
            with pytest.raises(WorkspaceInUseError):
                with second.claim():
                    pass

        with second.claim():
            pass
