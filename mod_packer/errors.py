"""
패키저 예외 정의

탐색 실패와 예상치 못한 I/O 오류만 예외로 전파되고
린트/병합/변환 단계의 문제는 결과 객체에 수집됩니다.
"""

from typing import Optional


class PackerError(Exception):
    """모드 패키저 예외의 기본 클래스"""


class DescriptorNotFoundError(PackerError, FileNotFoundError):
    """meta.lsx를 찾지 못했고 생성되지도 않은 경우"""


class MalformedInputError(PackerError, ValueError):
    """meta.lsx 또는 조각 문서를 해석할 수 없는 경우"""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ExternalToolError(PackerError):
    """외부 변환/패키징 도구 실패"""


class WorkspaceInUseError(PackerError, RuntimeError):
    """같은 작업 공간 경로를 다른 실행이 사용 중인 경우"""
