from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

__all__ = [
    "ModuleShortDesc",
    "ModuleMetadata",
    "PackageManifest",
    "LintingErrorType",
    "LintingError",
    "decode_version64",
]


def decode_version64(version: Optional[str]) -> Optional[str]:
    """BG3의 64비트 패킹 버전을 ``major.minor.revision.build`` 문자열로 변환합니다.

    숫자가 아닌 버전 문자열은 그대로 반환합니다.
    """
    if version is None:
        return None
    try:
        packed = int(version)
    except ValueError:
        return version

    major = packed >> 55
    minor = (packed >> 47) & 0xFF
    revision = (packed >> 31) & 0xFFFF
    build = packed & 0x7FFFFFFF
    return f"{major}.{minor}.{revision}.{build}"


class ModuleShortDesc(BaseModel):
    """의존성 모듈 요약 (meta.lsx의 ModuleShortDesc 노드)"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: Optional[str] = Field(default=None, alias="Name")
    version: Optional[str] = Field(default=None, alias="Version")
    folder: Optional[str] = Field(default=None, alias="Folder")
    uuid: Optional[str] = Field(default=None, alias="UUID")


class ModuleMetadata(BaseModel):
    """meta.lsx 하나에서 읽어 들인 모듈 메타데이터"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    author: Optional[str] = Field(default=None, alias="Author")
    name: Optional[str] = Field(default=None, alias="Name")
    description: Optional[str] = Field(default=None, alias="Description")
    version: Optional[str] = Field(default=None, alias="Version")
    folder: Optional[str] = Field(default=None, alias="Folder")
    uuid: Optional[str] = Field(default=None, alias="UUID")
    created: Optional[datetime] = Field(default=None, alias="Created")
    group: str = Field(default="", alias="Group")
    dependencies: List[ModuleShortDesc] = Field(
        default_factory=list, alias="Dependencies"
    )

    @property
    def semantic_version(self) -> Optional[str]:
        return decode_version64(self.version)


class PackageManifest(BaseModel):
    """info.json 구조: 모듈 목록과 .pak 콘텐츠 해시"""

    model_config = ConfigDict(populate_by_name=True)

    mods: List[ModuleMetadata] = Field(default_factory=list, alias="Mods")
    md5: str = Field(default="", alias="MD5")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class LintingErrorType(str, Enum):
    ATTRIBUTE_MISSING = "AttributeMissing"
    MALFORMED_DOCUMENT = "MalformedDocument"


@dataclass
class LintingError:
    """린트 오류 하나 (작업 공간 기준 상대 경로)"""

    path: str
    message: str
    error_type: LintingErrorType
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.line is not None:
            return f"{self.path}:{self.line}: {self.message}"
        return f"{self.path}: {self.message}"
