"""
작업 공간(임시 스테이징 디렉토리) 관리 모듈
"""

import logging
import shutil
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional, Set

from ..errors import WorkspaceInUseError

logger = logging.getLogger(__name__)

DEFAULT_WORKSPACE_NAME = "BG3ModPacker"
MANIFEST_FILENAME = "info.json"
ARCHIVE_SUFFIX = ".pak"

# 현재 실행 중인 작업 공간 경로들 (경로당 동시에 하나의 실행만 허용)
_active_roots: Set[Path] = set()
_active_lock = threading.Lock()


class Workspace:
    """한 번의 실행이 독점하는 스테이징 디렉토리"""

    def __init__(self, root: Optional[Path] = None):
        """
        Args:
            root: 작업 공간 경로 (기본값: 시스템 임시 폴더/BG3ModPacker)
        """
        if root is None:
            root = Path(tempfile.gettempdir()) / DEFAULT_WORKSPACE_NAME
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"Workspace({self.root})"

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_FILENAME

    def mod_dir(self, mod_name: str) -> Path:
        """모드 빌드 디렉토리 경로"""
        return self.root / mod_name

    def archive_path(self, name: str) -> Path:
        """모드 .pak 출력 경로"""
        return self.root / f"{name}{ARCHIVE_SUFFIX}"

    def archives(self) -> List[Path]:
        """작업 공간 루트의 .pak 파일들을 파일 이름 순으로 반환합니다."""
        if not self.root.is_dir():
            return []
        return sorted(
            (p for p in self.root.iterdir() if p.is_file() and p.suffix == ARCHIVE_SUFFIX),
            key=lambda p: p.name,
        )

    def ensure(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def clean(self, log: bool = True) -> None:
        """작업 공간의 모든 파일과 디렉토리를 삭제합니다."""
        if not self.root.is_dir():
            return
        for entry in self.root.iterdir():
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        if log:
            logger.info(f"임시 파일 정리 완료: {self.root}")

    def clear_staging(self) -> None:
        """생성된 .pak은 남기고 나머지 스테이징 파일을 삭제합니다."""
        if not self.root.is_dir():
            return
        archives = set(self.archives())
        for entry in self.root.iterdir():
            if entry in archives:
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()

    def is_empty(self) -> bool:
        return not self.root.is_dir() or not any(self.root.iterdir())

    @contextmanager
    def claim(self):
        """이 작업 공간을 현재 실행 전용으로 점유합니다."""
        key = self.root.resolve()
        with _active_lock:
            if key in _active_roots:
                raise WorkspaceInUseError(f"작업 공간이 이미 사용 중입니다: {self.root}")
            _active_roots.add(key)
        try:
            yield self
        finally:
            with _active_lock:
                _active_roots.discard(key)
