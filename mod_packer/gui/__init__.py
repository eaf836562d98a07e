"""
GUI 모듈

Flet 기반 GUI 컴포넌트들을 포함합니다.
"""

from .dialogs import FletPackerUI
from .packer_logger import GUILogHandler, PackerLogger
from .packer_page import PackerPage

__all__ = ["FletPackerUI", "GUILogHandler", "PackerLogger", "PackerPage"]
