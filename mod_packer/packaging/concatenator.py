"""
Stats/Generated/Data 하위 파일 합치기 모듈
"""

import logging
import shutil
import time
from pathlib import Path
from typing import Callable

import aiofiles

from .base import GENERATED_DISCLAIMER, BaseStage, StageReport

logger = logging.getLogger(__name__)

GENERATED_DATA_PATH = Path("Stats") / "Generated" / "Data"
AGGREGATE_PREFIX = "__MT_GEN_"


def current_millis() -> int:
    return int(time.time() * 1000)


class GeneratedDataConcatenator(BaseStage):
    """Data/<하위 폴더>의 .txt 조각들을 타임스탬프가 붙은 파일 하나로 합치는 단계"""

    def __init__(self, clock: Callable[[], int] = current_millis):
        """
        Args:
            clock: 밀리초 단위 현재 시각을 반환하는 함수
        """
        self.clock = clock

    async def run(self, mod_dir: Path) -> StageReport:
        report = StageReport()

        for module_dir in self._module_dirs(mod_dir):
            data_dir = module_dir / GENERATED_DATA_PATH
            if not data_dir.is_dir():
                continue

            # 같은 밀리초에 다시 실행되면 같은 파일에 이어 씀
            now = self.clock()
            for subdir in sorted(p for p in data_dir.iterdir() if p.is_dir()):
                aggregate = await self._concatenate(subdir, now)
                report.processed += 1
                logger.info(f"생성 데이터 합치기: {subdir.name} → {aggregate.name}")

        return report

    async def _concatenate(self, subdir: Path, now: int) -> Path:
        files = sorted(subdir.rglob("*.txt"))
        aggregate = subdir.parent / f"{AGGREGATE_PREFIX}{subdir.name}_{now}.txt"

        async with aiofiles.open(aggregate, "a", encoding="utf-8") as out:
            await out.write(f"// ==== {GENERATED_DISCLAIMER} ====\n")
            for file_path in files:
                await out.write(f"// === {file_path.name} ===\n")
                async with aiofiles.open(
                    file_path, encoding="utf-8-sig", errors="replace"
                ) as f:
                    await out.write(await f.read())
                await out.write("\n")

        shutil.rmtree(subdir)
        return aggregate
