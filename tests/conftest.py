"""
테스트 공용 픽스처

외부 도구(divine)와 GUI 없이 파이프라인을 돌리기 위한 가짜 변환기/패키저/UI와
모드 폴더 생성 도우미를 제공합니다.
"""

import zipfile
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from mod_packer.errors import ExternalToolError
from mod_packer.packaging import (
    BasePackerUI,
    BasePakPackager,
    BaseResourceConverter,
    ModPackageManager,
    PackageOptions,
    Workspace,
)
from mod_packer.parsers.meta import build_meta_lsx
from mod_packer.utils.env_manager import PackerSettings

MOD_UUID = "6d6c2c3e-1111-4a2b-9c3d-0123456789ab"


def fragment(region_id: str, *node_ids: str) -> str:
    """children 아래에 주어진 id의 노드들을 가진 LSX 조각 문서"""
    nodes = "\n".join(
        f'                <node id="{node_id}">\n'
        f'                    <attribute id="Name" type="FixedString" value="{node_id}"/>\n'
        f"                </node>"
        for node_id in node_ids
    )
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        "<save>\n"
        '    <version major="4" minor="0" revision="9" build="331"/>\n'
        f'    <region id="{region_id}">\n'
        '        <node id="root">\n'
        "            <children>\n"
        f"{nodes}\n"
        "            </children>\n"
        "        </node>\n"
        "    </region>\n"
        "</save>\n"
    )


def write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def make_mod(tmp_path) -> Callable[..., Path]:
    """
    ``<root>/<name>/Mods/<name>/meta.lsx`` 와 ``Public/<name>/...`` 파일을 가진
    모드 폴더를 만드는 팩토리.
    """

    def _make_mod(
        name: str = "TestMod",
        public_files: Optional[Dict[str, str]] = None,
        files: Optional[Dict[str, str]] = None,
        with_meta: bool = True,
        root: Optional[Path] = None,
        module_uuid: str = MOD_UUID,
    ) -> Path:
        mod_path = (root or tmp_path / "source") / name
        mods_dir = mod_path / "Mods" / name
        mods_dir.mkdir(parents=True, exist_ok=True)
        if with_meta:
            write_file(
                mods_dir / "meta.lsx",
                build_meta_lsx(name, author="Tester", module_uuid=module_uuid),
            )
        for relative, content in (public_files or {}).items():
            write_file(mod_path / "Public" / name / relative, content)
        for relative, content in (files or {}).items():
            write_file(mod_path / relative, content)
        return mod_path

    return _make_mod


class FakeConverter(BaseResourceConverter):
    """변환 요청을 기록하고 원본 내용을 그대로 출력 경로에 쓰는 변환기"""

    def __init__(self, fail_formats=()):
        self.fail_formats = set(fail_formats)
        self.calls: List[tuple] = []

    def convert(self, source: Path, target_format: str, destination: Path) -> None:
        self.calls.append((source.name, target_format, destination.name))
        if target_format in self.fail_formats:
            raise ExternalToolError(f"변환 실패 ({source.name}): 테스트용 실패")
        destination.write_bytes(b"BIN:" + source.read_bytes())


class FakePackager(BasePakPackager):
    """빌드 디렉토리를 ZIP 형식으로 묶고 포함된 파일 목록을 기록하는 패키저"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.snapshots: Dict[str, List[str]] = {}
        self.options: List[PackageOptions] = []

    def create_package(
        self, source_dir: Path, destination: Path, options: PackageOptions
    ) -> Path:
        self.options.append(options)
        if self.fail:
            raise ExternalToolError("패키징 실패: 테스트용 실패")

        files = sorted(
            p.relative_to(source_dir).as_posix()
            for p in source_dir.rglob("*")
            if p.is_file()
        )
        self.snapshots[destination.name] = files
        with zipfile.ZipFile(destination, "w") as zipf:
            for relative in files:
                zipf.write(source_dir / relative, relative)
        return destination


class ScriptedUI(BasePackerUI):
    """미리 정한 응답을 돌려주고 호출을 기록하는 UI"""

    def __init__(self, create_descriptor: bool = False):
        self.create_descriptor = create_descriptor
        self.prompted: List[Path] = []
        self.shown_errors: List = []

    async def prompt_for_missing_descriptor(self, directory: Path) -> Optional[Path]:
        self.prompted.append(directory)
        if not self.create_descriptor:
            return None
        return write_file(
            directory / "meta.lsx",
            build_meta_lsx(directory.name, author="Prompted"),
        )

    async def show_lint_errors(self, errors) -> bool:
        self.shown_errors.extend(errors)
        return True


@pytest.fixture
def workspace(tmp_path) -> Workspace:
    return Workspace(tmp_path / "workspace")


@pytest.fixture
def settings(tmp_path) -> PackerSettings:
    return PackerSettings(workspace_dir=tmp_path / "workspace")


@pytest.fixture
def converter() -> FakeConverter:
    return FakeConverter()


@pytest.fixture
def packager() -> FakePackager:
    return FakePackager()


@pytest.fixture
def ui() -> ScriptedUI:
    return ScriptedUI()


@pytest.fixture
def manager(workspace, ui, converter, packager, settings) -> ModPackageManager:
    return ModPackageManager(
        workspace=workspace,
        ui=ui,
        converter=converter,
        packager=packager,
        settings=settings,
        clock=lambda: 1700000000000,
    )
