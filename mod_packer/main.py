"""
메인 애플리케이션 진입점

인자 없이 실행하면 Flet GUI를, 경로를 넘기면 GUI 없이 패키징합니다.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import flet as ft

from .gui import PackerPage
from .packaging import HeadlessPackerUI, ModPackageManager
from .utils.env_manager import EnvManager

# 로깅 설정
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def main(page: ft.Page):
    """GUI 진입점"""
    app = PackerPage(page)
    app.build_ui()
    logger.info("모드 폴더를 선택하면 패키징을 시작합니다")


async def package_headless(paths: List[Path], env_file: str = ".env") -> int:
    """GUI 없이 경로들을 패키징하고 종료 코드를 반환합니다."""
    settings = EnvManager(env_file).get_settings()
    manager = ModPackageManager(ui=HeadlessPackerUI(), settings=settings)
    results = await manager.process_drop(paths)
    return 0 if results and all(result.success for result in results) else 1


def run(argv: Optional[List[str]] = None):
    """콘솔 스크립트 진입점"""
    parser = argparse.ArgumentParser(
        prog="bg3-mod-packer", description="BG3 모드 폴더를 .pak/.zip으로 패키징"
    )
    parser.add_argument("paths", nargs="*", type=Path, help="패키징할 모드 폴더")
    parser.add_argument("--env-file", default=".env", help="설정 .env 파일 경로")
    args = parser.parse_args(argv)

    if not args.paths:
        ft.app(target=main)
        return

    sys.exit(asyncio.run(package_headless(args.paths, args.env_file)))


if __name__ == "__main__":
    run()
