"""
패키징 기본 클래스들
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..models import LintingError

logger = logging.getLogger(__name__)

# 생성된 파일 맨 앞에 들어가는 안내 문구
GENERATED_DISCLAIMER = (
    "Generated with bg3-mod-packer. Edit the source fragments instead of this file."
)


class PipelineState(str, Enum):
    DISCOVER = "discover"
    STAGE = "stage"
    LINT = "lint"
    CONSOLIDATE = "consolidate"
    MERGE = "merge"
    CONCATENATE_GENERATED = "concatenate_generated"
    CONVERT = "convert"
    PACK = "pack"
    PACKAGED = "packaged"
    ABORTED = "aborted"


class AbortReason(str, Enum):
    NOT_FOUND = "not_found"
    MALFORMED_INPUT = "malformed_input"
    VALIDATION_FAILURE = "validation_failure"
    EXTERNAL_TOOL_FAILURE = "external_tool_failure"
    NO_MODS_FOLDER = "no_mods_folder"
    UNSUPPORTED_INPUT = "unsupported_input"
    UNEXPECTED = "unexpected"


@dataclass
class PackagingResult:
    """패키징 결과를 담는 데이터 클래스"""

    success: bool
    output_path: Optional[Path] = None
    file_count: int = 0
    errors: List[str] = None
    state: PipelineState = PipelineState.DISCOVER
    abort_reason: Optional[AbortReason] = None
    lint_errors: List[LintingError] = None
    metadata_files: List[Path] = None

    def __post_init__(self):
        if self.errors is None:
            self.errors = []
        if self.lint_errors is None:
            self.lint_errors = []
        if self.metadata_files is None:
            self.metadata_files = []

    def advance(self, state: PipelineState) -> None:
        """다음 단계로 전이합니다. 중단된 결과는 전이하지 않습니다."""
        if self.state == PipelineState.ABORTED:
            raise RuntimeError("중단된 실행은 다음 단계로 진행할 수 없습니다")
        logger.debug(f"단계 전이: {self.state.value} → {state.value}")
        self.state = state
        if state == PipelineState.PACKAGED:
            self.success = True

    def abort(self, reason: AbortReason, message: Optional[str] = None) -> None:
        self.success = False
        self.state = PipelineState.ABORTED
        self.abort_reason = reason
        if message:
            self.errors.append(message)

    @property
    def aborted(self) -> bool:
        return self.state == PipelineState.ABORTED


@dataclass
class StageReport:
    """단일 단계의 처리 결과"""

    processed: int = 0
    notices: List[str] = None
    errors: List[str] = None

    def __post_init__(self):
        if self.notices is None:
            self.notices = []
        if self.errors is None:
            self.errors = []

    @property
    def ok(self) -> bool:
        return not self.errors


class BasePackerUI(ABC):
    """파이프라인이 사용자에게 묻거나 알리는 창구 (동기식 요청/응답)"""

    @abstractmethod
    async def prompt_for_missing_descriptor(self, directory: Path) -> Optional[Path]:
        """
        meta.lsx가 없는 디렉토리에 대해 생성을 요청합니다.

        Returns:
            생성된 meta.lsx 경로 또는 None (거절)
        """

    @abstractmethod
    async def show_lint_errors(self, errors: List[LintingError]) -> bool:
        """린트 오류를 보여주고 사용자가 닫으면 True를 반환합니다."""


class HeadlessPackerUI(BasePackerUI):
    """화면 없이 동작하는 기본 구현: 생성을 거절하고 오류는 로그로만 남깁니다."""

    async def prompt_for_missing_descriptor(self, directory: Path) -> Optional[Path]:
        logger.warning(f"meta.lsx가 없습니다 (자동 생성 안 함): {directory}")
        return None

    async def show_lint_errors(self, errors: List[LintingError]) -> bool:
        for error in errors:
            logger.error(f"린트 오류: {error}")
        return True


class BaseStage(ABC):
    """작업 공간의 모드 빌드 디렉토리를 변형하는 단계의 기본 클래스"""

    @abstractmethod
    async def run(self, mod_dir: Path) -> StageReport:
        """
        *mod_dir*(작업 공간 안의 모드 빌드 디렉토리)를 처리합니다.

        Returns:
            StageReport: 처리 결과
        """
        pass

    def _module_dirs(self, mod_dir: Path) -> List[Path]:
        """Public/<모듈 이름> 디렉토리 목록을 반환합니다."""
        public_dir = Path(mod_dir) / "Public"
        if not public_dir.is_dir():
            return []
        return sorted(p for p in public_dir.iterdir() if p.is_dir())


def remove_empty_directories(directory: Path) -> int:
    """
    *directory* 아래의 빈 하위 디렉토리를 아래쪽부터 삭제합니다.
    *directory* 자체는 남겨둡니다.

    Returns:
        int: 삭제된 디렉토리 수
    """
    removed = 0
    subdirs = sorted(
        (p for p in Path(directory).rglob("*") if p.is_dir()),
        key=lambda p: len(p.parts),
        reverse=True,
    )
    for subdir in subdirs:
        if not any(subdir.iterdir()):
            subdir.rmdir()
            removed += 1
    return removed
