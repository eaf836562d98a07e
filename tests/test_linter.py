"""
LSX 린터 테스트
"""

from conftest import fragment, write_file
from mod_packer.models import LintingErrorType
from mod_packer.parsers import LsxLinter

MISSING_VALUE = """<?xml version="1.0" encoding="utf-8"?>
<save>
    <region id="Foo">
        <node id="root">
            <children>
                <node id="Entry">
                    <attribute id="x" type="FixedString"/>
                </node>
            </children>
        </node>
    </region>
</save>
"""


class TestLsxLinter:
    """LsxLinter 테스트"""

    def test_clean_file(self, tmp_path):
        write_file(tmp_path / "Public" / "Mod" / "Lists" / "Foo.lsx", fragment("Foo", "A", "B"))

        assert LsxLinter(tmp_path).lint(tmp_path) == []

    def test_attribute_without_value_or_handle(self, tmp_path):
        """value와 handle이 모두 없으면 오류 하나, 줄 번호 포함"""
        write_file(tmp_path / "Mod" / "Bad.lsx", MISSING_VALUE)

        errors = LsxLinter(tmp_path).lint(tmp_path)

        assert len(errors) == 1
        error = errors[0]
        assert error.path == "Mod/Bad.lsx"
        assert error.error_type == LintingErrorType.ATTRIBUTE_MISSING
        assert error.line == 7
        assert "7" in error.message
        assert "'value' || 'handle'" in error.message

    def test_handle_satisfies_value(self, tmp_path):
        """TranslatedString은 value 대신 handle을 가질 수 있음"""
        write_file(
            tmp_path / "Ok.lsx",
            '<save><node id="n">'
            '<attribute id="DisplayName" type="TranslatedString" handle="h1" version="1"/>'
            "</node></save>",
        )

        assert LsxLinter(tmp_path).lint(tmp_path) == []

    def test_each_missing_attribute_reported(self, tmp_path):
        write_file(tmp_path / "Bad.lsx", '<save><node id="n"><attribute/></node></save>')

        errors = LsxLinter(tmp_path).lint(tmp_path)

        assert len(errors) == 3
        assert all(e.error_type == LintingErrorType.ATTRIBUTE_MISSING for e in errors)

    def test_node_without_id(self, tmp_path):
        write_file(tmp_path / "Bad.lsx", "<save>\n<node>\n</node>\n</save>")

        errors = LsxLinter(tmp_path).lint(tmp_path)

        assert len(errors) == 1
        assert errors[0].line == 2
        assert "node" in errors[0].message

    def test_malformed_document(self, tmp_path):
        """형식 오류 파일은 MalformedDocument 하나, 다른 파일은 계속 검사"""
        write_file(tmp_path / "a_broken.lsx", "<save><node id='x'></save>")
        write_file(tmp_path / "b_bad.lsx", MISSING_VALUE)

        errors = LsxLinter(tmp_path).lint(tmp_path)

        assert [e.error_type for e in errors] == [
            LintingErrorType.MALFORMED_DOCUMENT,
            LintingErrorType.ATTRIBUTE_MISSING,
        ]
        assert errors[0].path == "a_broken.lsx"
        assert errors[0].line == 1

    def test_only_lsx_files(self, tmp_path):
        write_file(tmp_path / "notes.xml", "<broken")
        write_file(tmp_path / "data.txt", "new entry")

        assert LsxLinter(tmp_path).lint(tmp_path) == []

    def test_missing_directory(self, tmp_path):
        assert LsxLinter().lint(tmp_path / "nope") == []
