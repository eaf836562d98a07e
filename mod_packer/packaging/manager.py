"""
패키징 관리자 모듈

드롭된 모드 폴더 하나하나에 대해 전체 패키징 파이프라인을 순서대로 실행합니다.
탐색 → 스테이징 → 린트 → 하위 폴더 정리 → 병합 → 생성 데이터 합치기 → 변환 → .pak
"""

import asyncio
import logging
import shutil
import uuid
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from ..errors import DescriptorNotFoundError, MalformedInputError
from ..parsers.linter import LsxLinter
from ..utils.env_manager import PackerSettings
from .archiver import BasePakPackager, DivinePackager, PackageOptions, PakArchiver
from .base import (
    AbortReason,
    BasePackerUI,
    HeadlessPackerUI,
    PackagingResult,
    PipelineState,
)
from .concatenator import GeneratedDataConcatenator, current_millis
from .consolidator import SubfolderConsolidator
from .converter import BaseResourceConverter, DivineConverter, FormatConverter
from .discovery import check_and_create_meta, copy_working_files
from .manifest import ManifestBuilder
from .merger import LsxMerger
from .workspace import Workspace

logger = logging.getLogger(__name__)


class ModPackageManager:
    """전체 패키징 작업을 관리하는 클래스"""

    def __init__(
        self,
        workspace: Optional[Workspace] = None,
        ui: Optional[BasePackerUI] = None,
        converter: Optional[BaseResourceConverter] = None,
        packager: Optional[BasePakPackager] = None,
        settings: Optional[PackerSettings] = None,
        clock: Callable[[], int] = current_millis,
    ):
        """
        Args:
            workspace: 작업 공간 (기본값: 설정의 workspace_dir)
            ui: 사용자 확인 창구 (기본값: HeadlessPackerUI)
            converter: 리소스 변환기 (기본값: divine CLI)
            packager: .pak 패키저 (기본값: divine CLI)
            settings: 패키저 설정
            clock: 생성 데이터 파일 이름에 쓰는 밀리초 시계
        """
        self.settings = settings or PackerSettings()
        self.workspace = workspace or Workspace(self.settings.workspace_dir)
        self.ui = ui or HeadlessPackerUI()

        converter = converter or DivineConverter(self.settings.divine_path)
        packager = packager or DivinePackager(self.settings.divine_path)

        # 단계 클래스들 초기화
        self.linter = LsxLinter(self.workspace.root)
        self.consolidator = SubfolderConsolidator()
        self.merger = LsxMerger()
        self.concatenator = GeneratedDataConcatenator(clock)
        self.format_converter = FormatConverter(converter)
        self.manifest_builder = ManifestBuilder(self.workspace)
        self.archiver = PakArchiver(
            self.workspace,
            packager,
            PackageOptions(
                version=self.settings.pak_version,
                priority=self.settings.pak_priority,
                compression=self.settings.pak_compression,
            ),
        )

        self._lock = asyncio.Lock()

    async def process_drop(self, paths: Iterable[Path]) -> List[PackagingResult]:
        """
        드롭된 경로들을 순서대로 처리합니다.

        Args:
            paths: 드롭된 폴더/파일 경로들

        Returns:
            List[PackagingResult]: 경로별 결과
        """
        results: List[PackagingResult] = []

        async with self._lock:
            with self.workspace.claim():
                self.workspace.ensure()
                self.workspace.clean()

                for full_path in map(Path, paths):
                    if full_path.is_dir():
                        results.append(await self.process_directory(full_path))
                    elif full_path.is_file():
                        message = f"폴더만 패키징할 수 있습니다: {full_path.name}"
                        logger.warning(message)
                        result = PackagingResult(success=False)
                        result.abort(AbortReason.UNSUPPORTED_INPUT, message)
                        results.append(result)
                    else:
                        message = f"경로를 처리할 수 없습니다: {full_path}"
                        logger.error(message)
                        result = PackagingResult(success=False)
                        result.abort(AbortReason.UNSUPPORTED_INPUT, message)
                        results.append(result)

        self._log_packaging_summary(results)
        return results

    async def process_directory(self, full_path: Path) -> PackagingResult:
        """
        드롭된 폴더 하나를 패키징합니다.

        ``<폴더>/Mods``가 있으면 단일 모드, 하위 어딘가에 Mods 폴더가 있으면
        각 하위 폴더를 모드로 취급합니다. 끝나면 작업 공간을 비웁니다.
        """
        full_path = Path(full_path)
        dir_name = full_path.name
        result = PackagingResult(success=False)

        try:
            meta_groups: Dict[str, List[Path]] = {}

            if (full_path / "Mods").is_dir():
                mod_dirs = [(full_path, dir_name)]
            elif any(p.is_dir() for p in full_path.rglob("Mods")):
                mod_dirs = []
                for child in sorted(p for p in full_path.iterdir() if p.is_dir()):
                    if (child / "Mods").is_dir():
                        mod_dirs.append((child, child.name))
                    else:
                        logger.info(f"Mods 폴더가 없어 건너뜀: {child.name}")
            else:
                mod_dirs = []

            if not mod_dirs:
                message = f"Mods 폴더를 찾을 수 없습니다: {full_path}"
                logger.error(message)
                result.abort(AbortReason.NO_MODS_FOLDER, message)
                return result

            for mod_path, mod_name in mod_dirs:
                mod_result = await self.process_mod(mod_path, mod_name)
                if mod_result.aborted:
                    return mod_result
                meta_groups[str(uuid.uuid4())] = mod_result.metadata_files
                result.metadata_files.extend(mod_result.metadata_files)
                result.file_count += mod_result.file_count
                result.errors.extend(mod_result.errors)

            result.state = PipelineState.PACK
            result.output_path = await self._finalize(full_path, dir_name, meta_groups)
            result.advance(PipelineState.PACKAGED)

        except DescriptorNotFoundError as e:
            logger.error(str(e))
            result.abort(AbortReason.NOT_FOUND, str(e))
        except MalformedInputError as e:
            logger.error(f"메타데이터 파싱 실패: {e}")
            result.abort(AbortReason.MALFORMED_INPUT, str(e))
        except OSError as e:
            logger.exception(f"패키징 중 오류 발생: {e}")
            result.abort(AbortReason.UNEXPECTED, str(e))
        finally:
            self.workspace.clean()

        return result

    async def process_mod(self, path: Path, dir_name: str) -> PackagingResult:
        """
        모드 하나를 빌드하고 ``<작업 공간>/<dir_name>.pak``으로 패키징합니다.
        """
        self.workspace.ensure()
        self.workspace.clear_staging()

        destination = self.workspace.archive_path(dir_name)
        logger.info(f"패키징 시도 중: {dir_name}")

        result = await self.build_pack(path)
        if result.aborted:
            return result

        result.advance(PipelineState.PACK)
        build_dir = result.output_path
        archive = self.archiver.pack_mod(build_dir, destination)
        shutil.rmtree(build_dir, ignore_errors=True)

        if archive is None:
            result.abort(
                AbortReason.EXTERNAL_TOOL_FAILURE, f".pak 생성 실패: {destination.name}"
            )
            return result

        result.output_path = archive
        result.advance(PipelineState.PACKAGED)
        return result

    async def build_pack(self, path: Path) -> PackagingResult:
        """
        변환된 파일들로 빌드 디렉토리를 만듭니다.

        Returns:
            PackagingResult: 성공 시 output_path가 작업 공간 안의 빌드 디렉토리

        Raises:
            DescriptorNotFoundError: meta.lsx를 찾을 수 없는 경우
        """
        path = Path(path)
        mod_name = path.name
        mod_dir = self.workspace.mod_dir(mod_name)
        result = PackagingResult(success=False)

        result.metadata_files = await check_and_create_meta(path, mod_name, self.ui)

        result.advance(PipelineState.STAGE)
        result.file_count = copy_working_files(path, mod_dir)

        result.advance(PipelineState.LINT)
        lint_errors = self.linter.lint(mod_dir)
        if lint_errors:
            logger.error("패키징 중 오류가 발견되었습니다")
            result.lint_errors = lint_errors
            await self.ui.show_lint_errors(lint_errors)
            result.abort(
                AbortReason.VALIDATION_FAILURE, f"린트 오류 {len(lint_errors)}개"
            )
            return result

        result.advance(PipelineState.CONSOLIDATE)
        await self.consolidator.run(mod_dir)

        result.advance(PipelineState.MERGE)
        merge_report = await self.merger.run(mod_dir)
        if not merge_report.ok:
            result.abort(AbortReason.MALFORMED_INPUT)
            result.errors.extend(merge_report.errors)
            return result

        result.advance(PipelineState.CONCATENATE_GENERATED)
        await self.concatenator.run(mod_dir)

        result.advance(PipelineState.CONVERT)
        convert_report = await self.format_converter.run(mod_dir)
        result.errors.extend(convert_report.notices)

        result.output_path = mod_dir
        return result

    async def _finalize(
        self, full_path: Path, dir_name: str, meta_groups: Dict[str, List[Path]]
    ) -> Optional[Path]:
        """Mods 폴더로 옮기거나 info.json + ZIP을 만듭니다."""
        if self.settings.pak_to_mods:
            mods_folder = self.settings.mods_folder
            installed = None
            if mods_folder is not None:
                for archive in self.workspace.archives():
                    installed = self.archiver.install_to_mods(archive, mods_folder)
            else:
                logger.warning("게임 문서 경로가 설정되지 않아 .pak을 옮기지 않습니다")
            return installed

        manifest = await self.manifest_builder.generate_info_json(meta_groups)
        if manifest is None:
            return None
        return self.archiver.create_zip(full_path, dir_name)

    def _log_packaging_summary(self, results: List[PackagingResult]) -> None:
        """패키징 결과 요약을 로그에 출력합니다."""
        if not results:
            return
        logger.info("=== 패키징 결과 ===")

        successful = 0
        for result in results:
            if result.success:
                successful += 1
                logger.info(f"✅ {result.file_count}개 파일 → {result.output_path}")
            else:
                reason = result.abort_reason.value if result.abort_reason else "unknown"
                logger.error(f"❌ 실패 [{reason}] ({', '.join(result.errors)})")

        logger.info(f"총 {successful}/{len(results)}개 패키지 생성")
