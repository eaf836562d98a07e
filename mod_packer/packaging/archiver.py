"""
.pak 생성 및 ZIP 압축 모듈

스테이징된 모드 디렉토리를 외부 패키저(LSLib divine)에 넘겨 .pak을 만들고,
작업 공간(info.json + .pak)을 ZIP으로 묶거나 게임 Mods 폴더로 옮깁니다.
"""

import logging
import shutil
import subprocess
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import ExternalToolError
from .workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageOptions:
    """.pak 생성 옵션 (BG3 기준)"""

    version: int = 18
    priority: int = 21
    compression: str = "lz4"


class BasePakPackager(ABC):
    """외부 .pak 패키저"""

    @abstractmethod
    def create_package(
        self, source_dir: Path, destination: Path, options: PackageOptions
    ) -> Path:
        """
        *source_dir*를 .pak으로 묶어 *destination*에 씁니다.

        Raises:
            ExternalToolError: 패키징 실패
        """


class DivinePackager(BasePakPackager):
    """LSLib divine CLI를 호출하는 패키저"""

    def __init__(self, divine_path: str = "divine", game: str = "bg3"):
        self.divine_path = divine_path
        self.game = game

    def create_package(
        self, source_dir: Path, destination: Path, options: PackageOptions
    ) -> Path:
        command = [
            self.divine_path,
            "--game", self.game,
            "--action", "create-package",
            "--source", str(source_dir),
            "--destination", str(destination),
            "--package-version", f"v{options.version}",
            "--package-priority", str(options.priority),
            "--compression-method", options.compression,
        ]
        try:
            completed = subprocess.run(command, capture_output=True, text=True)
        except OSError as e:
            raise ExternalToolError(f"divine 실행 실패: {e}") from e

        if completed.returncode != 0 or not destination.exists():
            raise ExternalToolError(
                f".pak 생성 실패: {completed.stderr.strip() or completed.stdout.strip()}"
            )
        return destination


class PakArchiver:
    """모드 빌드 디렉토리를 .pak으로, 작업 공간을 .zip으로 만드는 클래스"""

    def __init__(
        self,
        workspace: Workspace,
        packager: BasePakPackager,
        options: Optional[PackageOptions] = None,
    ):
        self.workspace = workspace
        self.packager = packager
        self.options = options or PackageOptions()

    def pack_mod(self, build_dir: Path, destination: Path) -> Optional[Path]:
        """
        모드를 .pak으로 패키징합니다. 실패는 로그로 남기고 None을 반환합니다.
        """
        self.workspace.ensure()
        try:
            archive = self.packager.create_package(build_dir, destination, self.options)
        except ExternalToolError as e:
            logger.error(f"모드 패키징 실패: {e}")
            return None

        logger.info(f".pak 생성: {archive.name}")
        return archive

    def create_zip(self, dropped_path: Path, name: str) -> Path:
        """
        작업 공간 내용을 드롭된 폴더 옆에 ``<name>.zip``으로 압축합니다.

        Returns:
            생성된 ZIP 파일 경로
        """
        zip_path = Path(dropped_path).parent / f"{name}.zip"
        if zip_path.exists():
            zip_path.unlink()

        root = self.workspace.root
        with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zipf:
            for file_path in sorted(root.rglob("*")):
                if file_path.is_file():
                    zipf.write(file_path, file_path.relative_to(root))

        logger.info(f"ZIP 생성: {zip_path}")
        return zip_path

    def install_to_mods(self, archive: Path, mods_folder: Path) -> Optional[Path]:
        """
        .pak을 게임 Mods 폴더로 옮깁니다 (같은 이름은 교체).

        Returns:
            옮겨진 경로, Mods 폴더가 없거나 .pak이 없으면 None
        """
        mods_folder = Path(mods_folder)
        if not mods_folder.is_dir():
            logger.warning(f"게임 Mods 폴더가 없습니다: {mods_folder}")
            return None
        if not archive.exists():
            logger.warning(f"옮길 .pak이 없습니다: {archive.name}")
            return None

        target = mods_folder / archive.name
        if target.exists():
            target.unlink()
        shutil.move(str(archive), str(target))
        logger.info(f".pak을 Mods 폴더로 이동: {target}")
        return target
