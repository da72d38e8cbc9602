"""End-to-end tests for migrating modules that use Expectations blocks."""

import re
import textwrap

import yaml

from expectations_to_mockito.context import MigrationConfig
from expectations_to_mockito.exceptions import MissingTypeInformation, ParseError, StructuralViolation
from expectations_to_mockito.main import migrate, migrate_code, migrate_file
from expectations_to_mockito.static_types import ClassType, TypeTable


def _imported_from_stub_module(code: str, name: str) -> bool:
    return re.search(rf"^from mockito import .*\b{name}\b", code, re.MULTILINE) is not None


CLASS_MODULE = textwrap.dedent(
    """\
    from mockit import Expectations

    from app.services import Service


    class TestService:
        service: Service

        def test_lookup(self):
            with Expectations():
                self.service.find(anyString)
                result = "found"
                times = 2
            assert self.service.find("k") == "found"
    """
)


def test_class_fields_supply_receiver_types():
    result = migrate_code(CLASS_MODULE)
    assert result.is_success()
    code = result.unwrap()

    assert "Expectations" not in code
    assert '        when(self.service.find(anyString())).thenReturn("found")\n' in code
    assert code.rstrip().endswith("verify(self.service, times(2)).find(anyString())")
    for name in ("when", "verify", "times", "anyString"):
        assert _imported_from_stub_module(code, name), name
    assert result.metadata["constructs_rewritten"] == 1


def test_parameter_annotations_and_count_only_group():
    source = textwrap.dedent(
        """\
        from mockit import Expectations
        from app.repos import Repository


        def test_save(repo: Repository):
            x = 1
            with Expectations():
                repo.save(withNotNull())
                times = 1
            repo.save(x)
        """
    )
    code = migrate_code(source).unwrap()
    expected_body = "    x = 1\n    repo.save(x)\n    verify(repo, times(1)).save(notNull())\n"
    assert expected_body in code
    assert not _imported_from_stub_module(code, "when")
    assert _imported_from_stub_module(code, "notNull")


def test_annotated_locals_and_several_constructs():
    source = textwrap.dedent(
        """\
        from mockit import Expectations
        from app.services import Service


        def test_two_blocks():
            svc: Service = make_service()
            with Expectations():
                svc.first()
                result = 1
            svc.first()
            with Expectations():
                svc.second()
                result = ValueError("boom")
            svc.second()
        """
    )
    result = migrate_code(source)
    code = result.unwrap()
    assert "    when(svc.first()).thenReturn(1)\n    svc.first()\n" in code
    assert "    when(svc.second()).thenThrow(ValueError(\"boom\"))\n    svc.second()\n" in code
    assert result.metadata["constructs_rewritten"] == 2


def test_supplied_types_are_used():
    source = "def test_value(svc):\n    with Expectations():\n        svc.getValue()\n        result = 'x'\n        times = 2\n"
    types = TypeTable({"svc": ClassType("app.services.Service")})
    code = migrate_code(source, types=types).unwrap()
    assert "    when(svc.getValue()).thenReturn('x')\n    verify(svc, times(2)).getValue()\n" in code


def test_module_without_constructs_is_unchanged():
    source = "def test_plain():\n    assert 1 + 1 == 2\n"
    result = migrate_code(source)
    assert result.unwrap() == source
    assert result.metadata["constructs_rewritten"] == 0


def test_syntax_error_is_parse_error():
    result = migrate_code("def broken(:\n    pass\n", filename="broken.py")
    assert result.is_error()
    assert isinstance(result.error, ParseError)
    assert result.error.details["source_file"] == "broken.py"
    assert "line" in result.error.details


def test_structural_violation_fails_the_migration():
    source = "def test_bad(svc):\n    with Expectations():\n        result = 1\n        svc.getValue()\n"
    result = migrate_code(source)
    assert result.is_error()
    assert isinstance(result.error, StructuralViolation)


def test_missing_receiver_type_fails_the_migration():
    source = "def test_count(svc):\n    with Expectations():\n        svc.getValue()\n        times = 1\n"
    result = migrate_code(source)
    assert isinstance(result.error, MissingTypeInformation)


def test_format_output_applies_black():
    source = "def test_value():\n    with Expectations():\n        helper( 1 )\n        result = 2\n"
    code = migrate_code(source, MigrationConfig(format_output=True)).unwrap()
    assert "    when(helper(1)).thenReturn(2)\n" in code


def test_custom_stub_module():
    source = "def test_value():\n    with Expectations():\n        helper()\n        result = 2\n"
    code = migrate_code(source, MigrationConfig(stub_module="my.mocks")).unwrap()
    assert re.search(r"^from my\.mocks import .*\bwhen\b", code, re.MULTILINE)


def test_migrate_file_writes_target_with_suffix(tmp_path):
    src = tmp_path / "test_sample.py"
    src.write_text(CLASS_MODULE, encoding="utf-8")
    result = migrate_file(str(src), MigrationConfig(target_suffix="_mockito"))
    assert result.is_success()
    target = tmp_path / "test_sample_mockito.py"
    assert result.unwrap() == str(target)
    assert "verify(self.service, times(2))" in target.read_text(encoding="utf-8")
    assert src.read_text(encoding="utf-8") == CLASS_MODULE
    assert result.metadata["changed"] is True


def test_migrate_file_dry_run_does_not_write(tmp_path):
    src = tmp_path / "test_sample.py"
    src.write_text(CLASS_MODULE, encoding="utf-8")
    result = migrate_file(str(src), MigrationConfig(dry_run=True))
    assert "thenReturn" in result.metadata["generated_code"]
    assert src.read_text(encoding="utf-8") == CLASS_MODULE


def test_migrate_loads_type_file(tmp_path):
    types_file = tmp_path / "types.yaml"
    types_file.write_text(yaml.safe_dump({"svc": "app.services.Service"}), encoding="utf-8")
    src = tmp_path / "test_value.py"
    src.write_text(
        "def test_value(svc):\n    with Expectations():\n        svc.getValue()\n        times = 3\n",
        encoding="utf-8",
    )
    result = migrate([str(src)], MigrationConfig(types_file=str(types_file)))
    assert result.is_success()
    assert "verify(svc, times(3)).getValue()" in src.read_text(encoding="utf-8")


def test_migrate_reports_failures_as_warnings(tmp_path):
    good = tmp_path / "test_good.py"
    good.write_text(CLASS_MODULE, encoding="utf-8")
    bad = tmp_path / "test_bad.py"
    bad.write_text("def test_bad(svc):\n    with Expectations():\n        result = 1\n", encoding="utf-8")

    result = migrate([str(good), str(bad)], MigrationConfig(dry_run=True))
    assert result.is_warning()
    assert result.unwrap() == [str(good)]
    assert str(bad) in result.metadata["failed"]


def test_migrate_fail_fast_stops_on_first_error(tmp_path):
    bad = tmp_path / "test_bad.py"
    bad.write_text("def test_bad(svc):\n    with Expectations():\n        result = 1\n", encoding="utf-8")
    result = migrate([str(bad)], MigrationConfig(fail_fast=True))
    assert result.is_error()
    assert isinstance(result.error, StructuralViolation)


def test_migrate_rejects_unreadable_type_file(tmp_path):
    result = migrate([], MigrationConfig(types_file=str(tmp_path / "missing.yaml")))
    assert result.is_error()


ERROR_DESCRIPTION = {
    "kind": "class",
    "name": "app.errors.ServiceError",
    "supertypes": ["builtins.Exception", "builtins.BaseException"],
}


def test_type_file_exception_wins_over_parameter_annotation(tmp_path):
    types_file = tmp_path / "types.yaml"
    types_file.write_text(
        yaml.safe_dump({"svc": "app.services.Service", "failure": ERROR_DESCRIPTION}), encoding="utf-8"
    )
    src = tmp_path / "test_fail.py"
    src.write_text(
        textwrap.dedent(
            """\
            from mockit import Expectations
            from app.errors import ServiceError


            def test_fail(svc, failure: ServiceError):
                with Expectations():
                    svc.getValue()
                    result = failure
            """
        ),
        encoding="utf-8",
    )
    result = migrate([str(src)], MigrationConfig(types_file=str(types_file)))
    assert result.is_success()
    code = src.read_text(encoding="utf-8")
    assert "    when(svc.getValue()).thenThrow(failure)\n" in code
    assert "thenReturn" not in code


def test_annotated_class_keeps_supertypes_from_supplied_types():
    source = textwrap.dedent(
        """\
        from app.errors import ServiceError


        def test_fail(svc, err: ServiceError):
            with Expectations():
                svc.getValue()
                result = err
        """
    )
    types = TypeTable.from_mapping({"svc": "app.services.Service", "known_error": ERROR_DESCRIPTION})
    code = migrate_code(source, types=types).unwrap()
    assert "    when(svc.getValue()).thenThrow(err)\n" in code


def test_one_line_construct_is_rewritten():
    source = textwrap.dedent(
        """\
        from mockit import Expectations


        def test_value(svc):
            with Expectations(): svc.getValue(); result = 1
            assert svc.getValue() == 1
        """
    )
    result = migrate_code(source, types=TypeTable({"svc": ClassType("app.services.Service")}))
    code = result.unwrap()
    assert "Expectations" not in code
    assert "    when(svc.getValue()).thenReturn(1)\n    assert svc.getValue() == 1\n" in code
    assert result.metadata["constructs_rewritten"] == 1
