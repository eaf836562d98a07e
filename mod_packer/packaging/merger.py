"""
LSX 조각 병합 모듈

Public/<모듈>/<카테고리>/ 아래의 조각 문서들을 논리적 엔티티별로 묶어
보일러플레이트 템플릿 하나로 합칩니다. 카테고리별 규칙은 MERGE_RULES 표로 정의합니다.
"""

import logging
import xml.etree.ElementTree as ET
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import aiofiles

from .base import GENERATED_DISCLAIMER, BaseStage, StageReport, remove_empty_directories
from .converter import can_convert_to_binary

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
BOILERPLATE_TEMPLATE = "LsxBoilerplate.lsx"


class GroupBy(str, Enum):
    CATEGORY = "category"  # 카테고리 전체가 하나의 그룹
    FILE_STEM = "file_stem"  # 마지막 확장자를 뗀 파일 이름별 그룹


@dataclass(frozen=True)
class MergeRule:
    """카테고리 하나의 병합 규칙

    region_id/node_id가 None이면 각각 그룹 키/템플릿 기본값을 사용하고,
    output_name이 None이면 ``<그룹 키>.lsx``로 저장합니다.
    """

    group_by: GroupBy = GroupBy.FILE_STEM
    region_id: Optional[str] = None
    node_id: Optional[str] = None
    output_name: Optional[str] = None
    require_convertible: bool = False
    template: str = BOILERPLATE_TEMPLATE

    def group_key(self, category: str, file_path: Path) -> str:
        if self.group_by == GroupBy.CATEGORY:
            return category
        return file_path.stem

    def output_filename(self, group_key: str) -> str:
        return self.output_name or f"{group_key}.lsx"


MERGE_RULES: Dict[str, MergeRule] = {
    "Progressions": MergeRule(),
    "Races": MergeRule(),
    "ClassDescriptions": MergeRule(),
    "ActionResourceDefinitions": MergeRule(),
    "Lists": MergeRule(),
    "RootTemplates": MergeRule(
        group_by=GroupBy.CATEGORY,
        region_id="Templates",
        node_id="Templates",
        output_name="_merged.lsf.lsx",
        require_convertible=True,
    ),
}


def load_file_template(name: str) -> str:
    """templates/ 폴더의 템플릿 파일 내용을 반환합니다."""
    return (TEMPLATES_DIR / name).read_text(encoding="utf-8")


class LsxMerger(BaseStage):
    """조각 문서를 그룹별로 병합하는 단계"""

    def __init__(self, rules: Mapping[str, MergeRule] = None):
        self.rules = dict(rules) if rules is not None else dict(MERGE_RULES)

    async def run(self, mod_dir: Path) -> StageReport:
        report = StageReport()

        for module_dir in self._module_dirs(mod_dir):
            for category, rule in self.rules.items():
                path = module_dir / category
                if path.is_dir():
                    await self._merge_category(path, category, rule, report)

        logger.info(f"LSX 병합 완료: {report.processed}개 파일 생성")
        return report

    def group_files(
        self, path: Path, category: str, rule: MergeRule
    ) -> "OrderedDict[str, List[Path]]":
        """카테고리 폴더의 .lsx 파일들을 열거 순서를 유지하며 그룹화합니다."""
        groups: "OrderedDict[str, List[Path]]" = OrderedDict()
        for file_path in sorted(path.rglob("*.lsx")):
            key = rule.group_key(category, file_path)
            groups.setdefault(key, []).append(file_path)
        return groups

    async def _merge_category(
        self, path: Path, category: str, rule: MergeRule, report: StageReport
    ) -> None:
        groups = self.group_files(path, category, rule)

        for group_key, files in groups.items():
            error_count = len(report.errors)
            merged = await self.merge_group(group_key, files, rule, report)
            if len(report.errors) > error_count:
                # 실패한 그룹은 원본을 덮어쓰지 않도록 저장하지 않음
                continue
            output_path = path / rule.output_filename(group_key)
            async with aiofiles.open(output_path, "w", encoding="utf-8") as f:
                await f.write(merged)
            report.processed += 1
            logger.info(
                f"병합 파일 저장: {category}/{output_path.name} ({len(files)}개 조각)"
            )

        remove_empty_directories(path)

    async def merge_group(
        self,
        group_key: str,
        files: List[Path],
        rule: MergeRule,
        report: StageReport,
    ) -> str:
        """
        그룹 하나를 템플릿에 병합하고 병합된 문서 문자열을 반환합니다.

        병합된 원본 파일은 삭제됩니다. 파싱할 수 없는 파일은 report.errors에
        기록하고 그대로 남겨둡니다.
        """
        template_root = ET.fromstring(load_file_template(rule.template))

        region = template_root.find(".//region")
        region.set("id", rule.region_id or group_key)
        if rule.node_id:
            region.find("node").set("id", rule.node_id)
        children = template_root.find(".//children")

        for file_path in files:
            if rule.require_convertible and not can_convert_to_binary(file_path.stem):
                logger.debug(f"변환 대상이 아니어서 제외: {file_path.name}")
                file_path.unlink()
                continue

            # 인코딩은 XML 선언을 따름
            async with aiofiles.open(file_path, "rb") as f:
                content = await f.read()
            try:
                contents = ET.fromstring(content)
            except (ET.ParseError, UnicodeDecodeError) as e:
                error_msg = f"조각 문서 파싱 실패 ({file_path.name}): {e}"
                logger.error(error_msg)
                report.errors.append(error_msg)
                continue

            source_children = contents.find(".//children")
            if source_children is not None:
                for child in list(source_children):
                    children.append(child)
            file_path.unlink()

        ET.indent(template_root, space="    ")
        body = ET.tostring(template_root, encoding="unicode")
        return (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            f"<!--{GENERATED_DISCLAIMER}-->\n"
            f"{body}\n"
        )
