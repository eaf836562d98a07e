"""
LSX 조각 병합 테스트
"""

import asyncio
import xml.etree.ElementTree as ET

from conftest import fragment, write_file
from mod_packer.packaging import MERGE_RULES, LsxMerger
from mod_packer.packaging.base import GENERATED_DISCLAIMER, StageReport


def child_ids(path):
    root = ET.parse(path).getroot()
    return [node.get("id") for node in root.find(".//children")]


class TestLsxMerger:
    """LsxMerger 테스트"""

    def test_merges_fragments_in_order(self, tmp_path):
        """같은 이름의 조각 F1, F2, F3이 열거 순서대로 하나로 합쳐짐"""
        lists = tmp_path / "Public" / "Mod" / "Lists"
        write_file(lists / "Foo.lsx", fragment("Ignored", "F1"))
        write_file(lists / "Part2" / "Foo.lsx", fragment("Ignored", "F2"))
        write_file(lists / "Part3" / "Foo.lsx", fragment("Ignored", "F3"))

        report = asyncio.run(LsxMerger().run(tmp_path))

        assert report.ok
        assert report.processed == 1
        merged = lists / "Foo.lsx"
        assert child_ids(merged) == ["F1", "F2", "F3"]
        assert ET.parse(merged).getroot().find(".//region").get("id") == "Foo"
        assert sorted(p.name for p in lists.rglob("*")) == ["Foo.lsx"]

    def test_merged_file_has_disclaimer(self, tmp_path):
        write_file(tmp_path / "Public" / "Mod" / "Races" / "Elf.lsx", fragment("Races", "E"))

        asyncio.run(LsxMerger().run(tmp_path))

        content = (tmp_path / "Public" / "Mod" / "Races" / "Elf.lsx").read_text(encoding="utf-8")
        assert content.startswith('<?xml version="1.0" encoding="utf-8"?>\n')
        assert GENERATED_DISCLAIMER in content.splitlines()[1]

    def test_groups_by_file_stem(self, tmp_path):
        progressions = tmp_path / "Public" / "Mod" / "Progressions"
        write_file(progressions / "A.lsx", fragment("x", "A1"))
        write_file(progressions / "B.lsx", fragment("x", "B1"))
        write_file(progressions / "sub" / "A.lsx", fragment("x", "A2"))

        report = asyncio.run(LsxMerger().run(tmp_path))

        assert report.processed == 2
        assert child_ids(progressions / "A.lsx") == ["A1", "A2"]
        assert child_ids(progressions / "B.lsx") == ["B1"]

    def test_root_templates(self, tmp_path):
        """RootTemplates는 변환 가능한 조각만 _merged.lsf.lsx 하나로 합침"""
        templates = tmp_path / "Public" / "Mod" / "RootTemplates"
        write_file(templates / "Chair.lsf.lsx", fragment("Templates", "Chair"))
        write_file(templates / "sub" / "Table.lsf.lsx", fragment("Templates", "Table"))
        write_file(templates / "Notes.lsx", fragment("Templates", "Notes"))

        asyncio.run(LsxMerger().run(tmp_path))

        merged = templates / "_merged.lsf.lsx"
        root = ET.parse(merged).getroot()
        region = root.find(".//region")
        assert region.get("id") == "Templates"
        assert region.find("node").get("id") == "Templates"
        assert child_ids(merged) == ["Chair", "Table"]
        assert [p.name for p in templates.rglob("*")] == ["_merged.lsf.lsx"]

    def test_unknown_category_untouched(self, tmp_path):
        other = write_file(tmp_path / "Public" / "Mod" / "Tags" / "a.lsx", fragment("x", "A"))

        report = asyncio.run(LsxMerger().run(tmp_path))

        assert report.processed == 0
        assert other.read_text(encoding="utf-8") == fragment("x", "A")

    def test_parse_error_keeps_source(self, tmp_path):
        """파싱할 수 없는 조각은 오류로 기록되고 원본이 남음"""
        lists = tmp_path / "Public" / "Mod" / "Lists"
        broken = write_file(lists / "Foo.lsx", "<save><region>")

        report = asyncio.run(LsxMerger().run(tmp_path))

        assert not report.ok
        assert "Foo.lsx" in report.errors[0]
        assert broken.read_text(encoding="utf-8") == "<save><region>"

    def test_merge_group_directly(self, tmp_path):
        first = write_file(tmp_path / "one.lsx", fragment("x", "A", "B"))
        second = write_file(tmp_path / "two.lsx", fragment("x", "C"))
        report = StageReport()

        merged = asyncio.run(
            LsxMerger().merge_group("Spells", [first, second], MERGE_RULES["Lists"], report)
        )

        root = ET.fromstring(merged.split("\n", 2)[2])
        assert root.find(".//region").get("id") == "Spells"
        assert [n.get("id") for n in root.find(".//children")] == ["A", "B", "C"]
        assert not first.exists() and not second.exists()

    def test_rule_table(self):
        assert list(MERGE_RULES) == [
            "Progressions",
            "Races",
            "ClassDescriptions",
            "ActionResourceDefinitions",
            "Lists",
            "RootTemplates",
        ]
        assert MERGE_RULES["RootTemplates"].output_filename("RootTemplates") == "_merged.lsf.lsx"
        assert MERGE_RULES["Lists"].output_filename("Foo") == "Foo.lsx"

    def test_declared_encoding_is_honoured(self, tmp_path):
        """XML 선언의 인코딩(ISO-8859-1)으로 읽고 UTF-8로 저장"""
        lists = tmp_path / "Public" / "Mod" / "Lists"
        lists.mkdir(parents=True)
        latin = fragment("x", "Café").replace('encoding="utf-8"', 'encoding="ISO-8859-1"')
        (lists / "Foo.lsx").write_bytes(latin.encode("iso-8859-1"))

        report = asyncio.run(LsxMerger().run(tmp_path))

        assert report.ok
        assert child_ids(lists / "Foo.lsx") == ["Café"]
        assert "Café" in (lists / "Foo.lsx").read_text(encoding="utf-8")

    def test_undecodable_fragment_is_reported(self, tmp_path):
        """선언과 다른 바이트는 오류로 기록되고 원본이 남음"""
        lists = tmp_path / "Public" / "Mod" / "Lists"
        lists.mkdir(parents=True)
        broken = lists / "Foo.lsx"
        broken.write_bytes(fragment("x", "Café").encode("iso-8859-1"))

        report = asyncio.run(LsxMerger().run(tmp_path))

        assert not report.ok
        assert "Foo.lsx" in report.errors[0]
        assert broken.exists()
