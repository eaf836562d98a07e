"""
LSX 구조 린터

작업 공간의 .lsx 파일들을 스트리밍 방식(SAX)으로 한 번 훑으며
필수 속성 누락과 XML 형식 오류를 수집합니다. 파일 단위로 예외를 던지지 않습니다.
"""

import logging
import xml.sax
from pathlib import Path
from typing import List, Optional

from ..models import LintingError, LintingErrorType

logger = logging.getLogger(__name__)


class _LsxLintHandler(xml.sax.handler.ContentHandler):
    """attribute/node 요소의 필수 속성을 검사하는 SAX 핸들러"""

    def __init__(self, relative_path: str, errors: List[LintingError]):
        super().__init__()
        self.relative_path = relative_path
        self.errors = errors
        self._locator = None

    def setDocumentLocator(self, locator):
        self._locator = locator

    def startElement(self, name, attrs):
        if name == "attribute":
            if attrs.get("id") is None:
                self._missing("'id'")
            if attrs.get("type") is None:
                self._missing("'type'")
            if attrs.get("value") is None and attrs.get("handle") is None:
                self._missing("'value' || 'handle'")
        elif name == "node":
            if attrs.get("id") is None:
                self._missing("'id'", element="node")

    def _missing(self, attribute: str, element: str = "attribute"):
        line = self._locator.getLineNumber() if self._locator else None
        self.errors.append(
            LintingError(
                path=self.relative_path,
                message=f"{line}번째 줄: {element} 요소에 {attribute} 속성이 없습니다",
                error_type=LintingErrorType.ATTRIBUTE_MISSING,
                line=line,
            )
        )


class LsxLinter:
    """작업 공간의 LSX 문서를 검사하는 린터"""

    file_pattern = "*.lsx"

    def __init__(self, workspace_root: Optional[Path] = None):
        """
        Args:
            workspace_root: 오류 경로를 상대 경로로 만들 기준 디렉토리
        """
        self.workspace_root = Path(workspace_root) if workspace_root else None

    def lint(self, directory: Path) -> List[LintingError]:
        """
        *directory* 아래 모든 .lsx 파일을 검사합니다.

        Returns:
            List[LintingError]: 발견된 오류 목록 (비어 있으면 통과)
        """
        directory = Path(directory)
        errors: List[LintingError] = []
        if not directory.is_dir():
            return errors

        files = sorted(directory.rglob(self.file_pattern))
        for file_path in files:
            errors.extend(self.lint_file(file_path))

        if errors:
            logger.error(f"린트 오류 {len(errors)}개 발견 ({len(files)}개 파일 검사)")
        else:
            logger.info(f"린트 통과: {len(files)}개 파일")
        return errors

    def lint_file(self, file_path: Path) -> List[LintingError]:
        """파일 하나를 검사합니다. 형식 오류가 나면 해당 파일만 중단합니다."""
        relative_path = self._relative(file_path)
        errors: List[LintingError] = []
        handler = _LsxLintHandler(relative_path, errors)

        parser = xml.sax.make_parser()
        parser.setContentHandler(handler)
        try:
            parser.parse(str(file_path))
        except xml.sax.SAXParseException as e:
            errors.append(
                LintingError(
                    path=relative_path,
                    message=str(e),
                    error_type=LintingErrorType.MALFORMED_DOCUMENT,
                    line=e.getLineNumber(),
                )
            )
        except (xml.sax.SAXException, OSError, UnicodeDecodeError) as e:
            errors.append(
                LintingError(
                    path=relative_path,
                    message=str(e),
                    error_type=LintingErrorType.MALFORMED_DOCUMENT,
                )
            )
        return errors

    def _relative(self, file_path: Path) -> str:
        if self.workspace_root:
            try:
                return file_path.relative_to(self.workspace_root).as_posix()
            except ValueError:
                pass
        return file_path.as_posix()
