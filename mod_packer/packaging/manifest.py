"""
info.json 생성 모듈

모드 메타데이터 목록과 .pak 파일들의 MD5 해시를 info.json으로 저장합니다.
"""

import hashlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import aiofiles

from ..models import ModuleMetadata, PackageManifest
from ..parsers.meta import MetaLsxParser
from .workspace import Workspace

logger = logging.getLogger(__name__)

HASH_CHUNK_SIZE = 1024 * 1024


def compute_archive_hash(archives: Iterable[Path]) -> str:
    """
    주어진 순서대로 이어 붙인 파일 내용의 MD5를 소문자 16진수로 반환합니다.
    """
    md5 = hashlib.md5()
    for archive in archives:
        with open(archive, "rb") as f:
            for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
                md5.update(chunk)
    return md5.hexdigest().lower()


class ManifestBuilder:
    """작업 공간 루트에 info.json을 만드는 클래스"""

    def __init__(self, workspace: Workspace):
        self.workspace = workspace

    async def collect_metadata(
        self, meta_groups: Dict[str, List[Path]], created: Optional[datetime] = None
    ) -> List[ModuleMetadata]:
        """그룹별 meta.lsx를 읽어 메타데이터 목록을 만듭니다."""
        created = created or datetime.now()
        mods: List[ModuleMetadata] = []

        for group, meta_files in meta_groups.items():
            for meta in meta_files:
                metadata = await MetaLsxParser(meta, created=created, group=group).parse()
                mods.append(metadata)
                logger.info(
                    f"메타데이터 생성: {metadata.name} (버전 {metadata.semantic_version})"
                )
        return mods

    async def generate_info_json(
        self, meta_groups: Dict[str, List[Path]], created: Optional[datetime] = None
    ) -> Optional[Path]:
        """
        info.json을 생성합니다.

        Args:
            meta_groups: {그룹 키: meta.lsx 경로 목록}
            created: 모든 레코드에 공통으로 기록할 생성 시각

        Returns:
            생성된 info.json 경로, 메타데이터가 하나도 없으면 None
        """
        mods = await self.collect_metadata(meta_groups, created)
        if not mods:
            logger.warning("메타데이터가 없어 info.json을 만들지 않습니다")
            return None

        archives = self.workspace.archives()
        manifest = PackageManifest(mods=mods, md5=compute_archive_hash(archives))

        manifest_path = self.workspace.manifest_path
        async with aiofiles.open(manifest_path, "w", encoding="utf-8") as f:
            await f.write(manifest.to_json())

        logger.info(
            f"info.json 생성 완료: {len(mods)}개 모듈, {len(archives)}개 .pak (MD5 {manifest.md5})"
        )
        return manifest_path
