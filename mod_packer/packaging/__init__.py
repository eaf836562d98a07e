"""
모드 패키징 모듈

드롭된 BG3 모드 소스 폴더를 게임에서 바로 쓸 수 있는 형태로 패키징합니다.
- 린트: .lsx 구조 검사
- 병합: Public/<모듈>/ 아래 조각 문서 합치기
- 변환: 텍스트 리소스 → 바이너리 (.lsf, .loca)
- 아카이브: .pak 생성, info.json + ZIP 또는 게임 Mods 폴더 설치
"""

from .archiver import BasePakPackager, DivinePackager, PackageOptions, PakArchiver
from .base import (
    AbortReason,
    BasePackerUI,
    HeadlessPackerUI,
    PackagingResult,
    PipelineState,
    StageReport,
)
from .concatenator import GeneratedDataConcatenator
from .consolidator import SubfolderConsolidator
from .converter import BaseResourceConverter, DivineConverter, FormatConverter
from .manager import ModPackageManager
from .manifest import ManifestBuilder, compute_archive_hash
from .merger import MERGE_RULES, LsxMerger, MergeRule
from .worker import PackagingWorker
from .workspace import Workspace

__all__ = [
    "AbortReason",
    "BasePackerUI",
    "BasePakPackager",
    "BaseResourceConverter",
    "DivineConverter",
    "DivinePackager",
    "FormatConverter",
    "GeneratedDataConcatenator",
    "HeadlessPackerUI",
    "LsxMerger",
    "MERGE_RULES",
    "ManifestBuilder",
    "MergeRule",
    "ModPackageManager",
    "PackageOptions",
    "PackagingResult",
    "PackagingWorker",
    "PakArchiver",
    "PipelineState",
    "StageReport",
    "SubfolderConsolidator",
    "Workspace",
    "compute_archive_hash",
]
