"""
포맷 변환 모듈

텍스트 리소스(.lsf.lsx, .loca.xml 등)를 게임이 읽는 바이너리 형식으로 변환합니다.
실제 변환은 LSLib의 divine CLI 같은 외부 도구가 담당합니다.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Tuple

from ..errors import ExternalToolError
from .base import BaseStage, StageReport

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = (".lsx", ".lsj", ".xml")
CONVERTIBLE_EXTENSIONS = (".lsf", ".lsb", ".lsbs", ".lsbc")
LOCA_EXTENSION = ".loca"


def can_convert_to_binary(name: str) -> bool:
    """텍스트 확장자를 뗀 이름이 변환 가능한 확장자로 끝나는지 확인합니다."""
    return Path(name).suffix.lower() in CONVERTIBLE_EXTENSIONS


def split_conversion_target(file_name: str) -> Optional[Tuple[str, str]]:
    """
    변환 대상이면 (텍스트 확장자를 뗀 이름, 대상 포맷 태그)를 반환합니다.

    예: ``_merged.lsf.lsx`` → ``("_merged.lsf", "lsf")``,
    ``english.loca.xml`` → ``("english.loca", "loca")``
    """
    path = Path(file_name)
    if path.suffix.lower() not in TEXT_EXTENSIONS:
        return None

    conversion_name = path.stem
    second_extension = Path(conversion_name).suffix.lower()
    if second_extension in CONVERTIBLE_EXTENSIONS or second_extension == LOCA_EXTENSION:
        return conversion_name, second_extension[1:]
    return None


class BaseResourceConverter(ABC):
    """외부 리소스 변환기"""

    @abstractmethod
    def convert(self, source: Path, target_format: str, destination: Path) -> None:
        """
        *source*를 *target_format* 형식으로 변환해 *destination*에 씁니다.

        Args:
            source: 원본 텍스트 파일
            target_format: 대상 포맷 태그 (점 없음, 예: "lsf", "loca")
            destination: 텍스트 확장자를 뗀 출력 경로

        Raises:
            ExternalToolError: 변환 실패
        """


class DivineConverter(BaseResourceConverter):
    """LSLib divine CLI를 호출하는 변환기"""

    def __init__(self, divine_path: str = "divine", game: str = "bg3"):
        self.divine_path = divine_path
        self.game = game

    def convert(self, source: Path, target_format: str, destination: Path) -> None:
        action = "convert-loca" if target_format == "loca" else "convert-resource"
        command = [
            self.divine_path,
            "--game", self.game,
            "--action", action,
            "--source", str(source),
            "--destination", str(destination),
        ]
        if action == "convert-resource":
            command += ["--output-format", target_format]

        try:
            completed = subprocess.run(command, capture_output=True, text=True)
        except OSError as e:
            raise ExternalToolError(f"divine 실행 실패: {e}") from e

        if completed.returncode != 0:
            raise ExternalToolError(
                f"변환 실패 ({source.name}): {completed.stderr.strip() or completed.stdout.strip()}"
            )


class FormatConverter(BaseStage):
    """작업 공간의 변환 가능한 파일을 모두 변환하는 단계"""

    def __init__(self, converter: BaseResourceConverter):
        self.converter = converter

    async def run(self, mod_dir: Path) -> StageReport:
        report = StageReport()
        file_list = sorted(p for p in Path(mod_dir).rglob("*") if p.is_file())

        for file_path in file_list:
            target = split_conversion_target(file_path.name)
            if target is None:
                continue

            conversion_name, target_format = target
            destination = file_path.parent / conversion_name
            try:
                self.converter.convert(file_path, target_format, destination)
            except ExternalToolError as e:
                # 원본은 남겨두고 계속 진행
                logger.error(f"파일 변환 실패 ({file_path.name}): {e}")
                report.notices.append(str(e))
                continue

            file_path.unlink()
            report.processed += 1

        logger.info(f"파일 변환 완료: {report.processed}개")
        return report
