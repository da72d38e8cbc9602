"""expectations_to_mockito package.

This initializer is intentionally lightweight to avoid importing
submodules at package import time. Package-level names such as
``ExpectationsBlockRewriter`` are imported lazily on first access.

Copyright (c) 2025 Jim Schilling
This software is released under the MIT License.
"""

__version__ = "2025.0.1"
__author__ = "Jim Schilling"
__description__ = "Rewrite Expectations blocks into when/verify mock statements"

# Public API names. Submodules are imported lazily when accessed.
__all__ = [
    "main",
    "migrate",
    "migrate_code",
    "migrate_file",
    "MigrationConfig",
    "Result",
    "ResultStatus",
    "TypeTable",
    "ExpectationsBlockRewriter",
    "ExpectationsToMockitoCommand",
    # Exceptions
    "MigrationError",
    "ParseError",
    "TransformationError",
    "StructuralViolation",
    "MissingTypeInformation",
    "ConfigurationError",
]


def __getattr__(name: str):
    """Lazily import submodules/attributes on demand to avoid circular imports."""
    import importlib

    mapping = {
        "main": "expectations_to_mockito.main",
        "cli": "expectations_to_mockito.cli",
        "migrate": "expectations_to_mockito.main",
        "migrate_code": "expectations_to_mockito.main",
        "migrate_file": "expectations_to_mockito.main",
        "MigrationConfig": "expectations_to_mockito.context",
        "Result": "expectations_to_mockito.result",
        "ResultStatus": "expectations_to_mockito.result",
        "TypeTable": "expectations_to_mockito.static_types",
        "ExpectationsBlockRewriter": "expectations_to_mockito.transformers.expectations_rewriter",
        "ExpectationsToMockitoCommand": "expectations_to_mockito.transformers.expectations_transformer",
        # Exceptions
        "MigrationError": "expectations_to_mockito.exceptions",
        "ParseError": "expectations_to_mockito.exceptions",
        "TransformationError": "expectations_to_mockito.exceptions",
        "StructuralViolation": "expectations_to_mockito.exceptions",
        "MissingTypeInformation": "expectations_to_mockito.exceptions",
        "ConfigurationError": "expectations_to_mockito.exceptions",
    }

    if name not in mapping:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = importlib.import_module(mapping[name])

    # For 'main' and 'cli' we return the module itself
    if name in {"main", "cli"}:
        return module
    return getattr(module, name)


def __dir__():
    return sorted(list(globals().keys()) + __all__)
