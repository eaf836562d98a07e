"""
패키징 중 사용자 확인 다이얼로그

패키징은 작업자 스레드의 이벤트 루프에서 실행되므로, 다이얼로그는
페이지 이벤트 루프로 넘겨 열고 결과를 Future로 돌려받습니다.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import flet as ft

from ..models import LintingError
from ..packaging.base import BasePackerUI
from ..parsers.meta import write_meta_lsx

logger = logging.getLogger(__name__)


class FletPackerUI(BasePackerUI):
    """Flet 페이지에 모달 다이얼로그를 띄우는 UI 창구"""

    def __init__(self, page: ft.Page, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Args:
            page: Flet 페이지
            loop: 페이지 이벤트 루프 (기본값: 현재 실행 중인 루프)
        """
        self.page = page
        self.loop = loop or asyncio.get_running_loop()

    async def prompt_for_missing_descriptor(self, directory: Path) -> Optional[Path]:
        return await self._call_on_page(self._ask_for_descriptor(Path(directory)))

    async def show_lint_errors(self, errors: List[LintingError]) -> bool:
        return await self._call_on_page(self._show_lint_errors(errors))

    async def _call_on_page(self, coro):
        """페이지 루프에서 코루틴을 실행하고 결과를 기다립니다."""
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self.loop:
            return await coro
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        return await asyncio.wrap_future(future)

    async def _ask_for_descriptor(self, directory: Path) -> Optional[Path]:
        """meta.lsx 생성 폼을 띄웁니다. 취소하면 None."""
        answer: asyncio.Future = self.loop.create_future()

        name_field = ft.TextField(label="모드 이름", value=directory.name, autofocus=True)
        author_field = ft.TextField(label="작성자")
        description_field = ft.TextField(label="설명", multiline=True, max_lines=3)
        error_text = ft.Text("", color=ft.Colors.RED, size=12)

        async def on_create(e):
            name = (name_field.value or "").strip()
            if not name:
                error_text.value = "모드 이름을 입력하세요"
                self.page.update()
                return
            try:
                created = await write_meta_lsx(
                    directory,
                    name,
                    author=(author_field.value or "").strip(),
                    description=(description_field.value or "").strip(),
                    folder=directory.name,
                )
            except OSError as error:
                error_text.value = f"meta.lsx 생성 실패: {error}"
                self.page.update()
                return
            self.page.close(dialog)
            if not answer.done():
                answer.set_result(created)

        async def on_cancel(e):
            self.page.close(dialog)
            if not answer.done():
                answer.set_result(None)

        dialog = ft.AlertDialog(
            modal=True,
            title=ft.Text("meta.lsx가 없습니다", size=18, weight=ft.FontWeight.BOLD),
            content=ft.Container(
                content=ft.Column(
                    [
                        ft.Text(f"{directory} 에 meta.lsx를 만들까요?", size=12),
                        name_field,
                        author_field,
                        description_field,
                        error_text,
                    ],
                    tight=True,
                    spacing=10,
                ),
                width=450,
            ),
            actions=[
                ft.TextButton("취소", on_click=on_cancel),
                ft.ElevatedButton("생성", icon=ft.Icons.NOTE_ADD, on_click=on_create),
            ],
            actions_alignment=ft.MainAxisAlignment.END,
        )
        self.page.open(dialog)

        created = await answer
        if created:
            logger.info(f"meta.lsx 생성: {created}")
        else:
            logger.info("meta.lsx 생성이 취소되었습니다")
        return created

    async def _show_lint_errors(self, errors: List[LintingError]) -> bool:
        """린트 오류 목록을 보여주고 닫힐 때까지 기다립니다."""
        closed: asyncio.Future = self.loop.create_future()

        async def on_close(e):
            self.page.close(dialog)
            if not closed.done():
                closed.set_result(True)

        error_list = ft.ListView(
            controls=[
                ft.Row(
                    [
                        ft.Icon(ft.Icons.ERROR_OUTLINE, color=ft.Colors.RED, size=16),
                        ft.Text(str(error), size=12, selectable=True, expand=True),
                    ],
                    vertical_alignment=ft.CrossAxisAlignment.START,
                )
                for error in errors
            ],
            spacing=6,
            height=300,
        )

        dialog = ft.AlertDialog(
            modal=True,
            title=ft.Text(
                f"린트 오류 {len(errors)}개", size=18, weight=ft.FontWeight.BOLD
            ),
            content=ft.Container(content=error_list, width=600),
            actions=[ft.TextButton("닫기", on_click=on_close)],
            actions_alignment=ft.MainAxisAlignment.END,
        )
        self.page.open(dialog)
        return await closed
