"""
백그라운드 패키징 작업자

UI 스레드를 막지 않도록 드롭 처리를 단일 작업자 스레드에서 실행합니다.
동시에 들어온 드롭은 병렬로 처리되지 않고 순서대로 대기합니다.
"""

import asyncio
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List

from .base import PackagingResult
from .manager import ModPackageManager

logger = logging.getLogger(__name__)


class PackagingWorker:
    """드롭 요청을 하나씩 처리하는 단일 스레드 작업자"""

    def __init__(self, manager: ModPackageManager):
        self.manager = manager
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="mod-packer"
        )

    def submit(self, paths: Iterable[Path]) -> "Future[List[PackagingResult]]":
        """드롭된 경로들을 대기열에 넣고 결과 Future를 반환합니다."""
        paths = [Path(p) for p in paths]
        logger.info(f"패키징 요청 등록: {len(paths)}개 경로")
        return self._executor.submit(self._run, paths)

    def _run(self, paths: List[Path]) -> List[PackagingResult]:
        return asyncio.run(self.manager.process_drop(paths))

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
