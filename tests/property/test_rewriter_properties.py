"""Property-based tests for the expectation block rewriter.

These tests generate test functions with fillers around one expectation
block and check the rewritten body: stubs take the block's place in group
order, verifications close the body in group order, and every other
statement keeps its relative position.
"""

import ast

from hypothesis import given

from expectations_to_mockito.main import migrate_code
from tests.hypothesis_config import DEFAULT_SETTINGS
from tests.property.strategies import GeneratedTest, generated_tests
from tests.test_utils import SERVICE_TYPES, RecordingImports, rewrite_source


class TestExpectationsRewriterProperties:
    """Property-based tests for ExpectationsBlockRewriter."""

    @DEFAULT_SETTINGS
    @given(test=generated_tests())
    def test_rewritten_body_layout(self, test: GeneratedTest) -> None:
        assert rewrite_source(test.source()) == test.expected_statements()

    @DEFAULT_SETTINGS
    @given(test=generated_tests())
    def test_imports_follow_generated_statements(self, test: GeneratedTest) -> None:
        imports = RecordingImports()
        rewrite_source(test.source(), imports=imports)

        assert imports.removed == ["mockit.Expectations"]
        has_stub = any(g.results for g in test.groups)
        has_verification = any(g.count is not None for g in test.groups)
        assert ("mockito.when" in imports.added) == has_stub
        assert ("mockito.verify" in imports.added) == has_verification
        assert ("mockito.times" in imports.added) == has_verification

    @DEFAULT_SETTINGS
    @given(test=generated_tests())
    def test_migrated_module_is_valid_python_without_expectations(self, test: GeneratedTest) -> None:
        result = migrate_code("from mockit import Expectations\n\n\n" + test.source(), types=SERVICE_TYPES)
        code = result.unwrap()

        ast.parse(code)
        assert "Expectations" not in code
        assert result.metadata["constructs_rewritten"] == 1
