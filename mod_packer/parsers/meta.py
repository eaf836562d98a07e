"""
meta.lsx 읽기/쓰기 모듈

모드의 정체성과 의존성을 설명하는 meta.lsx를 ModuleMetadata로 변환하고,
meta.lsx가 없는 모드를 위해 새 문서를 생성합니다.
"""

from __future__ import annotations

import io
import logging
import uuid as uuid_lib
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import aiofiles

from ..errors import MalformedInputError
from ..models import ModuleMetadata, ModuleShortDesc
from .base import BaseLsxParser, attribute_value, find_node

logger = logging.getLogger(__name__)

META_FILENAME = "meta.lsx"

# 새 meta.lsx의 기본 버전 (1.0.0.0)
DEFAULT_VERSION64 = str(1 << 55)


class MetaLsxParser(BaseLsxParser):
    """meta.lsx를 파싱하여 ModuleMetadata를 만드는 파서입니다."""

    def __init__(
        self,
        path: Path,
        created: Optional[datetime] = None,
        group: str = "",
    ):
        super().__init__(path)
        self.created = created
        self.group = group

    async def parse(self) -> ModuleMetadata:
        """meta.lsx를 읽어 ModuleMetadata를 반환합니다."""
        self._check_extension()
        content = await self._read_text()
        root = self._load_xml(content)

        module_info = find_node(root, "ModuleInfo")
        if module_info is None:
            raise MalformedInputError(
                f"ModuleInfo 노드가 없습니다: {self.path}", str(self.path)
            )

        version = attribute_value(module_info, "Version")
        if version is None:
            version = attribute_value(module_info, "Version64")

        metadata = ModuleMetadata(
            author=attribute_value(module_info, "Author"),
            name=attribute_value(module_info, "Name"),
            description=attribute_value(module_info, "Description"),
            version=version,
            folder=attribute_value(module_info, "Folder"),
            uuid=attribute_value(module_info, "UUID"),
            created=self.created,
            group=self.group,
            dependencies=self._parse_dependencies(root),
        )
        logger.debug(f"메타데이터 읽기 완료: {metadata.name} ({self.path})")
        return metadata

    def _parse_dependencies(self, root: ET.Element) -> List[ModuleShortDesc]:
        dependencies = find_node(root, "Dependencies")
        if dependencies is None:
            return []

        result = []
        for description in dependencies.iterfind(".//node[@id='ModuleShortDesc']"):
            version = attribute_value(description, "Version")
            if version is None:
                version = attribute_value(description, "Version64")
            result.append(
                ModuleShortDesc(
                    name=attribute_value(description, "Name"),
                    version=version,
                    folder=attribute_value(description, "Folder"),
                    uuid=attribute_value(description, "UUID"),
                )
            )
        return result


def _attribute(parent: ET.Element, attribute_id: str, attr_type: str, value: str):
    ET.SubElement(
        parent, "attribute", {"id": attribute_id, "type": attr_type, "value": value}
    )


def build_meta_lsx(
    name: str,
    author: str = "",
    description: str = "",
    folder: Optional[str] = None,
    module_uuid: Optional[str] = None,
    version64: str = DEFAULT_VERSION64,
) -> str:
    """
    새 meta.lsx 문서 문자열을 생성합니다.

    Args:
        name: 모드 이름
        author: 작성자
        description: 설명
        folder: 모드 폴더 이름 (기본값: name)
        module_uuid: 모듈 UUID (기본값: 새로 생성)
        version64: 64비트 패킹 버전

    Returns:
        str: XML 선언을 포함한 meta.lsx 내용
    """
    save = ET.Element("save")
    ET.SubElement(
        save, "version", {"major": "4", "minor": "0", "revision": "9", "build": "331"}
    )
    region = ET.SubElement(save, "region", {"id": "Config"})
    root = ET.SubElement(region, "node", {"id": "root"})
    root_children = ET.SubElement(root, "children")

    ET.SubElement(root_children, "node", {"id": "Dependencies"})

    module_info = ET.SubElement(root_children, "node", {"id": "ModuleInfo"})
    _attribute(module_info, "Author", "LSString", author)
    _attribute(module_info, "CharacterCreationLevelName", "FixedString", "")
    _attribute(module_info, "Description", "LSString", description)
    _attribute(module_info, "Folder", "LSString", folder or name)
    _attribute(module_info, "LobbyLevelName", "FixedString", "")
    _attribute(module_info, "MD5", "LSString", "")
    _attribute(module_info, "MainMenuBackgroundVideo", "FixedString", "")
    _attribute(module_info, "MenuLevelName", "FixedString", "")
    _attribute(module_info, "Name", "LSString", name)
    _attribute(module_info, "NumPlayers", "uint8", "4")
    _attribute(module_info, "PhotoBooth", "FixedString", "")
    _attribute(module_info, "StartupLevelName", "FixedString", "")
    _attribute(module_info, "Tags", "LSString", "")
    _attribute(module_info, "Type", "FixedString", "Add-on")
    _attribute(module_info, "UUID", "FixedString", module_uuid or str(uuid_lib.uuid4()))
    _attribute(module_info, "Version64", "int64", version64)

    info_children = ET.SubElement(module_info, "children")
    publish = ET.SubElement(info_children, "node", {"id": "PublishVersion"})
    _attribute(publish, "Version64", "int64", version64)

    ET.indent(save, space="    ")
    output = io.BytesIO()
    ET.ElementTree(save).write(output, encoding="UTF-8", xml_declaration=True)
    return output.getvalue().decode("UTF-8")


async def write_meta_lsx(directory: Path, name: str, **kwargs) -> Path:
    """
    *directory*에 meta.lsx를 생성합니다.

    Returns:
        Path: 생성된 meta.lsx 경로
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    meta_path = directory / META_FILENAME

    async with aiofiles.open(meta_path, "w", encoding="utf-8") as f:
        await f.write(build_meta_lsx(name, **kwargs))

    logger.info(f"meta.lsx 생성: {meta_path}")
    return meta_path
