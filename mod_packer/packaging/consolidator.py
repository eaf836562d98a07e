"""
하위 폴더 정리 모듈

Public/<모듈>/ 아래 지정된 폴더의 중첩 파일들을 최상위로 끌어올립니다.
"""

import logging
from pathlib import Path
from typing import Sequence

from .base import BaseStage, StageReport, remove_empty_directories

logger = logging.getLogger(__name__)

CONSOLIDATED_FOLDERS = ("MultiEffectInfos",)


class SubfolderConsolidator(BaseStage):
    """중첩된 파일을 폴더 최상위로 옮기는 단계 (같은 이름은 나중 파일이 덮어씀)"""

    def __init__(self, folders: Sequence[str] = CONSOLIDATED_FOLDERS):
        self.folders = tuple(folders)

    async def run(self, mod_dir: Path) -> StageReport:
        report = StageReport()

        for module_dir in self._module_dirs(mod_dir):
            for folder in self.folders:
                path = module_dir / folder
                if path.is_dir():
                    self._consolidate(path, report)

        if report.processed:
            logger.info(f"하위 폴더 정리: {report.processed}개 파일 이동")
        return report

    def _consolidate(self, path: Path, report: StageReport) -> None:
        nested_files = sorted(
            p for p in path.rglob("*") if p.is_file() and p.parent != path
        )
        for file_path in nested_files:
            new_file = path / file_path.name
            if new_file.exists():
                notice = f"중복 파일 발견, 교체합니다: {file_path.name}"
                logger.warning(notice)
                report.notices.append(notice)
            file_path.replace(new_file)
            report.processed += 1

        remove_empty_directories(path)
