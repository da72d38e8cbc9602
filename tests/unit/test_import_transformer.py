import re

import libcst as cst
from libcst.codemod import CodemodContext
from libcst.codemod.visitors import AddImportsVisitor, RemoveImportsVisitor

from expectations_to_mockito.transformers.import_transformer import CodemodImportRegistry, split_symbol


def test_split_symbol():
    assert split_symbol("mockito.when") == ("mockito", "when")
    assert split_symbol("a.b.c") == ("a.b", "c")
    assert split_symbol("mockito") == ("mockito", None)


def test_registry_schedules_additions():
    context = CodemodContext()
    registry = CodemodImportRegistry(context)
    registry.ensure_imported("mockito.when")
    registry.ensure_imported("mockito.verify")

    module = AddImportsVisitor(context).transform_module(cst.parse_module("x = 1\n"))
    assert re.search(r"^from mockito import .*\bwhen\b", module.code, re.MULTILINE)
    assert re.search(r"^from mockito import .*\bverify\b", module.code, re.MULTILINE)


def test_registry_removes_unused_marker_import():
    context = CodemodContext()
    registry = CodemodImportRegistry(context)
    registry.ensure_not_imported("mockit.Expectations")

    source = "from mockit import Expectations\n\nx = 1\n"
    module = RemoveImportsVisitor(context).transform_module(cst.parse_module(source))
    assert "Expectations" not in module.code


def test_registry_keeps_marker_import_still_in_use():
    context = CodemodContext()
    registry = CodemodImportRegistry(context)
    registry.ensure_not_imported("mockit.Expectations")

    source = "from mockit import Expectations\n\nwith Expectations():\n    pass\n"
    module = RemoveImportsVisitor(context).transform_module(cst.parse_module(source))
    assert "from mockit import Expectations" in module.code
