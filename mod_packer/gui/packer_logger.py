"""
패키징 로그 관리 모듈
"""

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

import flet as ft

LEVEL_COLORS = {
    "ERROR": ft.Colors.RED,
    "WARNING": ft.Colors.ORANGE,
    "SUCCESS": ft.Colors.GREEN,
    "INFO": ft.Colors.BLUE_GREY_200,
}


class PackerLogger:
    """패키징 로그 관리 클래스"""

    def __init__(self, page: ft.Page):
        self.page = page

        # 로그 관련
        self.log_messages = []
        self.max_log_messages = 200  # 로그 수 제한

        # UI 컴포넌트들 (외부에서 설정)
        self.log_container: Optional[ft.ListView] = None
        self.gui_log_handler = None

    def set_log_container(self, log_container: ft.ListView):
        """로그 컨테이너 설정"""
        self.log_container = log_container

    def setup_gui_log_handler(self):
        """GUI 로그 핸들러 설정"""
        # 기존 핸들러 제거 (중복 방지)
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            if isinstance(handler, GUILogHandler):
                root_logger.removeHandler(handler)

        self.gui_log_handler = GUILogHandler(self.add_log_message)
        self.gui_log_handler.setLevel(logging.INFO)
        self.gui_log_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(self.gui_log_handler)

    def cleanup_log_handler(self):
        """로그 핸들러 제거"""
        if self.gui_log_handler:
            logging.getLogger().removeHandler(self.gui_log_handler)
            self.gui_log_handler = None

    def add_log_message(self, level: str, message: str):
        """로그 메시지 추가"""
        timestamp = datetime.now().strftime("%H:%M:%S")
        level_upper = level.upper()
        self.log_messages.append(f"[{timestamp}] {level_upper}: {message}")
        if len(self.log_messages) > self.max_log_messages:
            self.log_messages = self.log_messages[-self.max_log_messages :]

        if self.log_container is None:
            return

        self.log_container.controls.append(
            ft.Text(
                f"[{timestamp}] {message}",
                size=12,
                color=LEVEL_COLORS.get(level_upper, ft.Colors.BLUE_GREY_200),
                selectable=True,
            )
        )
        if len(self.log_container.controls) > self.max_log_messages:
            del self.log_container.controls[0]

        try:
            self.page.update()
        except RuntimeError:
            # 페이지가 이미 닫힌 경우
            pass

    def clear_logs(self):
        """로그 지우기"""
        self.log_messages.clear()
        if self.log_container:
            self.log_container.controls.clear()
            self.page.update()

    def save_logs(self, directory: Path = Path(".")) -> Optional[Path]:
        """로그 저장"""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = Path(directory) / f"packer_log_{timestamp}.txt"
        try:
            with open(log_file, "w", encoding="utf-8") as f:
                f.write(f"저장 시간: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
                f.write("=" * 50 + "\n\n")
                for message in self.log_messages:
                    f.write(message + "\n")
        except OSError as error:
            self.add_log_message("ERROR", f"로그 저장 실패: {error}")
            return None

        self.add_log_message("INFO", f"로그가 저장되었습니다: {log_file}")
        return log_file


class GUILogHandler(logging.Handler):
    """GUI에 로그를 전달하는 핸들러"""

    def __init__(self, add_log_callback, min_interval: float = 0.0):
        super().__init__()
        self.add_log_callback = add_log_callback
        self.min_interval = min_interval
        self._in_emit = False  # 무한 루프 방지
        self._last_emit_time = 0.0

    def emit(self, record):
        if self._in_emit:
            return

        # GUI, flet 로그는 제외
        if record.name.startswith("mod_packer.gui") or record.name.startswith("flet"):
            return

        # 경고 이상은 빈도 제한 없이 전달
        current_time = time.time()
        if (
            record.levelno < logging.WARNING
            and current_time - self._last_emit_time < self.min_interval
        ):
            return
        self._last_emit_time = current_time

        self._in_emit = True
        try:
            self.add_log_callback(record.levelname, self.format(record))
        except Exception:
            self.handleError(record)
        finally:
            self._in_emit = False
