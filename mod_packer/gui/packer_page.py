"""
메인 패키징 페이지

폴더를 선택(드롭)하면 작업자 스레드에서 패키징을 실행하고 로그를 보여줍니다.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import flet as ft

from ..packaging import ModPackageManager, PackagingResult, PackagingWorker
from ..utils.env_manager import EnvManager
from .dialogs import FletPackerUI
from .packer_logger import PackerLogger

logger = logging.getLogger(__name__)


class PackerPage:
    """모드 폴더 선택, 설정, 로그 표시를 담당하는 페이지"""

    def __init__(self, page: ft.Page, env_manager: Optional[EnvManager] = None):
        self.page = page
        self.env_manager = env_manager or EnvManager()
        self.settings = self.env_manager.get_settings()

        self.packer_logger = PackerLogger(page)
        self.manager = ModPackageManager(
            ui=FletPackerUI(page), settings=self.settings
        )
        self.worker = PackagingWorker(self.manager)

        # UI 컴포넌트들
        self.log_container: Optional[ft.ListView] = None
        self.status_text: Optional[ft.Text] = None
        self.progress_ring: Optional[ft.ProgressRing] = None
        self.pick_button: Optional[ft.ElevatedButton] = None
        self.pak_to_mods_switch: Optional[ft.Switch] = None
        self.documents_field: Optional[ft.TextField] = None

        # 폴더 선택용 파일 피커 (overlay 에 추가해야 동작함)
        self.folder_picker = ft.FilePicker(on_result=self.on_folder_selected)
        self.page.overlay.append(self.folder_picker)

        self.setup_page()

    def setup_page(self):
        """페이지 설정 구성"""
        self.page.title = "BG3 Mod Packer"
        self.page.theme_mode = ft.ThemeMode.DARK
        self.page.window_width = 900
        self.page.window_height = 700
        self.page.padding = 20
        self.page.on_disconnect = self.on_disconnect

    def build_ui(self):
        """UI 구성"""
        self.page.clean()

        self.pick_button = ft.ElevatedButton(
            "모드 폴더 선택",
            icon=ft.Icons.FOLDER_OPEN,
            on_click=lambda e: self.folder_picker.get_directory_path(
                dialog_title="패키징할 모드 폴더"
            ),
        )
        self.progress_ring = ft.ProgressRing(width=20, height=20, visible=False)
        self.status_text = ft.Text("폴더를 선택하면 패키징을 시작합니다", size=13)

        self.pak_to_mods_switch = ft.Switch(
            label=".pak을 게임 Mods 폴더로 바로 옮기기",
            value=self.settings.pak_to_mods,
            on_change=self.on_settings_changed,
        )
        self.documents_field = ft.TextField(
            label="게임 문서 폴더 (예: .../Larian Studios/Baldur's Gate 3)",
            value=str(self.settings.game_documents_path or ""),
            on_blur=self.on_settings_changed,
            expand=True,
        )

        self.log_container = ft.ListView(expand=True, spacing=2, auto_scroll=True)
        self.packer_logger.set_log_container(self.log_container)
        self.packer_logger.setup_gui_log_handler()

        self.page.add(
            ft.Column(
                [
                    ft.Text("BG3 Mod Packer", size=24, weight=ft.FontWeight.BOLD),
                    ft.Row(
                        [self.pick_button, self.progress_ring, self.status_text],
                        vertical_alignment=ft.CrossAxisAlignment.CENTER,
                    ),
                    ft.Divider(),
                    self.pak_to_mods_switch,
                    ft.Row([self.documents_field]),
                    ft.Divider(),
                    ft.Row(
                        [
                            ft.Text("로그", size=16, weight=ft.FontWeight.BOLD),
                            ft.IconButton(
                                icon=ft.Icons.DELETE_SWEEP,
                                tooltip="로그 지우기",
                                on_click=lambda e: self.packer_logger.clear_logs(),
                            ),
                            ft.IconButton(
                                icon=ft.Icons.SAVE,
                                tooltip="로그 저장",
                                on_click=lambda e: self.packer_logger.save_logs(),
                            ),
                        ]
                    ),
                    ft.Container(
                        content=self.log_container,
                        expand=True,
                        border=ft.border.all(1, ft.Colors.OUTLINE),
                        border_radius=8,
                        padding=10,
                    ),
                ],
                expand=True,
            )
        )
        self.page.update()

    def on_settings_changed(self, e):
        """설정 변경을 저장하고 관리자에 반영"""
        self.settings.pak_to_mods = bool(self.pak_to_mods_switch.value)
        documents = (self.documents_field.value or "").strip()
        self.settings.game_documents_path = Path(documents) if documents else None

        try:
            self.env_manager.save_settings(self.settings)
        except OSError as error:
            self.packer_logger.add_log_message("ERROR", f"설정 저장 실패: {error}")

    async def on_folder_selected(self, e: ft.FilePickerResultEvent):
        """폴더가 선택되면 패키징 시작"""
        if e.path:
            await self.package_paths([Path(e.path)])

    async def package_paths(self, paths: List[Path]) -> List[PackagingResult]:
        """작업자 스레드에 패키징을 맡기고 결과를 기다립니다."""
        self._set_busy(True, f"패키징 중: {', '.join(p.name for p in paths)}")
        try:
            results = await asyncio.wrap_future(self.worker.submit(paths))
        except Exception as error:
            logger.exception(f"패키징 작업 실패: {error}")
            self._set_busy(False, f"패키징 실패: {error}")
            return []

        succeeded = sum(1 for result in results if result.success)
        self._set_busy(False, f"완료: {succeeded}/{len(results)}개 성공")
        self._show_results(results)
        return results

    def _set_busy(self, busy: bool, message: str):
        self.pick_button.disabled = busy
        self.progress_ring.visible = busy
        self.status_text.value = message
        self.page.update()

    def _show_results(self, results: List[PackagingResult]):
        for result in results:
            if result.success:
                target = result.output_path or "작업 공간"
                self.packer_logger.add_log_message("SUCCESS", f"🎉 패키징 완료: {target}")
            else:
                reason = result.abort_reason.value if result.abort_reason else "unknown"
                self.packer_logger.add_log_message("ERROR", f"패키징 중단 [{reason}]")

    def on_disconnect(self, e):
        """페이지 종료 시 정리"""
        self.packer_logger.cleanup_log_handler()
        self.worker.shutdown(wait=False)
