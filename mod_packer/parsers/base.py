from __future__ import annotations

import abc
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Optional

import aiofiles

from ..errors import MalformedInputError


class BaseLsxParser(abc.ABC):
    """LSX(XML) 문서를 읽어 구조화된 값을 반환하는 추상 파서입니다.

    파서는 *path*를 읽고 도메인 레코드를 반환합니다.
    문서가 올바른 XML이 아니면 :class:`MalformedInputError`를 발생시킵니다.
    """

    #: 지원되는 파일 이름 접미사 목록 (점 포함)
    file_extensions: tuple[str, ...] = (".lsx",)

    def __init__(self, path: Path):
        self.path = Path(path)

    # ------------------------------------------------------------------
    # 공개 API
    # ------------------------------------------------------------------
    @abc.abstractmethod
    async def parse(self) -> Any:
        """*path*에서 읽은 레코드를 반환합니다."""

    # ------------------------------------------------------------------
    # 헬퍼
    # ------------------------------------------------------------------
    def _check_extension(self) -> None:
        if self.file_extensions and self.path.suffix.lower() not in self.file_extensions:
            raise ValueError(
                f"지원하지 않는 파일 형식 {self.path} for {self.__class__.__name__}"
            )

    async def _read_text(self) -> str:
        async with aiofiles.open(self.path, encoding="utf-8-sig", errors="replace") as f:
            return await f.read()

    def _load_xml(self, content: str) -> ET.Element:
        """XML 문자열을 파싱하여 루트 요소를 반환합니다."""
        try:
            return ET.fromstring(content)
        except ET.ParseError as e:
            raise MalformedInputError(f"XML 파싱 오류: {e}", str(self.path)) from e


def find_node(root: ET.Element, node_id: str) -> Optional[ET.Element]:
    """문서 전체에서 ``node[@id=node_id]``의 첫 요소를 찾습니다."""
    if root.tag == "node" and root.get("id") == node_id:
        return root
    return root.find(f".//node[@id='{node_id}']")


def attribute_value(node: ET.Element, attribute_id: str) -> Optional[str]:
    """노드 바로 아래 ``attribute[@id=attribute_id]``의 value를 반환합니다."""
    attribute = node.find(f"attribute[@id='{attribute_id}']")
    if attribute is None:
        return None
    return attribute.get("value")
