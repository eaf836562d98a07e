"""
환경 변수 관리 유틸리티 모듈

.env 파일 읽기/쓰기 및 패키저 설정(PackerSettings) 제공
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class PackerSettings:
    """패키저 설정"""

    pak_to_mods: bool = False
    game_documents_path: Optional[Path] = None
    divine_path: str = "divine"
    workspace_dir: Path = Path(tempfile.gettempdir()) / "BG3ModPacker"
    pak_version: int = 18
    pak_priority: int = 21
    pak_compression: str = "lz4"

    @property
    def mods_folder(self) -> Optional[Path]:
        """게임 문서 폴더 아래 Mods 폴더"""
        if self.game_documents_path is None:
            return None
        return self.game_documents_path / "Mods"


class EnvManager:
    """환경 변수 관리자 클래스"""

    def __init__(self, env_file_path: str = ".env"):
        self.env_file_path = Path(env_file_path)
        self.env_data: Dict[str, str] = {}
        self.load_env_file()

    def load_env_file(self):
        """환경 변수 파일 로드"""
        if not self.env_file_path.exists():
            logger.info(f"환경 변수 파일이 없습니다: {self.env_file_path}")
            return

        try:
            with open(self.env_file_path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        key, value = line.split("=", 1)
                        key = key.strip()
                        value = value.strip()

                        # 따옴표 제거
                        if value.startswith('"') and value.endswith('"'):
                            value = value[1:-1]
                        elif value.startswith("'") and value.endswith("'"):
                            value = value[1:-1]

                        self.env_data[key] = value
                        # 환경 변수에도 설정
                        os.environ[key] = value

            logger.info(f"환경 변수 파일 로드 완료: {len(self.env_data)}개 변수")

        except OSError as e:
            logger.error(f"환경 변수 파일 로드 실패: {e}")

    def save_env_file(self):
        """환경 변수 파일 저장"""
        try:
            self.env_file_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.env_file_path, "w", encoding="utf-8") as f:
                f.write("# Auto-generated environment variables\n")
                f.write("# BG3 mod packer configuration\n\n")

                for key, value in self.env_data.items():
                    # 값에 공백이나 특수문자가 있으면 따옴표로 감싸기
                    if " " in value or any(
                        char in value for char in ["#", "=", "\n", "\r"]
                    ):
                        f.write(f'{key}="{value}"\n')
                    else:
                        f.write(f"{key}={value}\n")

            logger.info(f"환경 변수 파일 저장 완료: {self.env_file_path}")

        except OSError as e:
            logger.error(f"환경 변수 파일 저장 실패: {e}")
            raise

    def get_env_var(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """환경 변수 값 조회"""
        value = os.environ.get(key)
        if value is not None:
            return value

        return self.env_data.get(key, default)

    def set_env_var(self, key: str, value: str):
        """환경 변수 설정"""
        self.env_data[key] = value
        os.environ[key] = value
        logger.debug(f"환경 변수 설정: {key}")

    def _get_int(self, key: str, default: int) -> int:
        value = self.get_env_var(key)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning(f"정수가 아닌 설정값 무시: {key}={value}")
            return default

    def get_settings(self) -> PackerSettings:
        """환경 변수에서 패키저 설정을 만듭니다."""
        defaults = PackerSettings()

        game_documents = self.get_env_var("BG3_GAME_DOCUMENTS_PATH")
        workspace_dir = self.get_env_var("BG3_WORKSPACE_DIR")
        pak_to_mods = self.get_env_var("BG3_PAK_TO_MODS", "false")

        return PackerSettings(
            pak_to_mods=pak_to_mods.strip().lower() in TRUE_VALUES,
            game_documents_path=Path(game_documents) if game_documents else None,
            divine_path=self.get_env_var("BG3_DIVINE_PATH") or defaults.divine_path,
            workspace_dir=Path(workspace_dir) if workspace_dir else defaults.workspace_dir,
            pak_version=self._get_int("BG3_PAK_VERSION", defaults.pak_version),
            pak_priority=self._get_int("BG3_PAK_PRIORITY", defaults.pak_priority),
            pak_compression=self.get_env_var("BG3_PAK_COMPRESSION")
            or defaults.pak_compression,
        )

    def save_settings(self, settings: PackerSettings):
        """패키저 설정을 .env 파일에 저장"""
        self.set_env_var("BG3_PAK_TO_MODS", "true" if settings.pak_to_mods else "false")
        if settings.game_documents_path:
            self.set_env_var("BG3_GAME_DOCUMENTS_PATH", str(settings.game_documents_path))
        self.set_env_var("BG3_DIVINE_PATH", settings.divine_path)
        self.set_env_var("BG3_WORKSPACE_DIR", str(settings.workspace_dir))
        self.set_env_var("BG3_PAK_VERSION", str(settings.pak_version))
        self.set_env_var("BG3_PAK_PRIORITY", str(settings.pak_priority))
        self.set_env_var("BG3_PAK_COMPRESSION", settings.pak_compression)

        self.save_env_file()

    def get_config_summary(self) -> Dict:
        """설정 요약 정보"""
        settings = self.get_settings()
        return {
            "env_file_exists": self.env_file_path.exists(),
            "env_file_path": str(self.env_file_path),
            "total_vars": len(self.env_data),
            "pak_to_mods": settings.pak_to_mods,
            "mods_folder": str(settings.mods_folder) if settings.mods_folder else None,
            "workspace_dir": str(settings.workspace_dir),
        }
