"""
meta.lsx 탐색 및 스테이징 모듈

모드 폴더에서 meta.lsx를 찾고(없으면 UI에 생성을 요청),
작업 파일들을 작업 공간으로 복사합니다.
"""

import bisect
import logging
import shutil
from pathlib import Path
from typing import Dict, List

from ..errors import DescriptorNotFoundError
from ..parsers.meta import META_FILENAME
from .base import BasePackerUI

logger = logging.getLogger(__name__)


async def get_meta_lsx_list(
    candidate_dirs: List[Path], ui: BasePackerUI
) -> List[Path]:
    """
    후보 디렉토리들에서 meta.lsx 목록을 만듭니다.

    하나도 없으면 후보 디렉토리마다 한 번씩 UI에 생성을 요청합니다.

    Raises:
        DescriptorNotFoundError: 요청 후에도 meta.lsx가 없는 경우
    """
    meta_list: List[Path] = []
    for mod in candidate_dirs:
        meta_path = Path(mod) / META_FILENAME
        if meta_path.is_file():
            meta_list.append(meta_path)
            logger.info(f"meta.lsx 발견: {Path(mod).name}")

    if not meta_list:
        for mod in candidate_dirs:
            created = await ui.prompt_for_missing_descriptor(Path(mod))
            if created:
                meta_list.append(Path(created))

        if not meta_list:
            raise DescriptorNotFoundError(
                "meta.lsx를 찾을 수 없습니다. 패키징을 중단합니다."
            )

    return meta_list


async def check_and_create_meta(
    path: Path, mod_name: str, ui: BasePackerUI
) -> List[Path]:
    """
    Mods/ 아래의 모듈 디렉토리에서 meta.lsx를 찾습니다.

    Mods/에 하위 디렉토리가 없으면 Mods/<mod_name>을 만들어 후보로 사용합니다.
    """
    mods_path = Path(path) / "Mods"
    candidate_dirs = sorted(p for p in mods_path.iterdir() if p.is_dir())
    if not candidate_dirs:
        new_mods_path = mods_path / mod_name
        new_mods_path.mkdir(parents=True, exist_ok=True)
        candidate_dirs = [new_mods_path]

    return await get_meta_lsx_list(candidate_dirs, ui)


def _is_shadowed(name: str, sorted_names: List[str]) -> bool:
    """같은 이름으로 시작하는 형제 파일이 있는지 확인합니다 (예: Foo.lsf 옆의 Foo.lsf.lsx).

    *sorted_names*는 같은 디렉토리의 정렬된 파일 이름 목록입니다. 이름이 *name*으로
    시작하는 항목은 정렬 순서상 *name* 바로 뒤에 모입니다.
    """
    index = bisect.bisect_right(sorted_names, name)
    return index < len(sorted_names) and sorted_names[index].startswith(name)


def copy_working_files(path: Path, mod_dir: Path) -> int:
    """
    모드 원본 파일들을 작업 공간으로 복사합니다.

    확장자가 없는 파일과, 같은 이름의 텍스트 원본이 함께 있는 파일은 건너뜁니다.

    Returns:
        int: 복사된 파일 수
    """
    path = Path(path)
    mod_dir = Path(mod_dir)
    copied = 0

    files = sorted(p for p in path.rglob("*") if p.is_file())

    # 디렉토리별 파일 이름 목록 (디렉토리마다 한 번만 수집)
    siblings: Dict[Path, List[str]] = {}
    for file_path in files:
        siblings.setdefault(file_path.parent, []).append(file_path.name)
    for names in siblings.values():
        names.sort()

    for file_path in files:
        if not file_path.suffix:
            continue
        if _is_shadowed(file_path.name, siblings[file_path.parent]):
            logger.debug(f"텍스트 원본이 있어 건너뜀: {file_path.name}")
            continue

        target = mod_dir / file_path.relative_to(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(file_path, target)
        copied += 1

    logger.info(f"작업 파일 {copied}개 복사: {path} → {mod_dir}")
    return copied
