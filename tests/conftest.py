import os
import sys

import pytest

# Forged handles raise in tests unless explicitly overridden.
os.environ.setdefault("ENUMS_ARENA_TEST_GUARDS", "1")

# Ensure src/ is importable without an editable install.
SRC = os.path.join(os.path.dirname(os.path.dirname(__file__)), "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

import enums_arena as ea  # noqa: E402

_MARKER_DESCRIPTIONS = {
    "schema": "variant descriptor sets and naming",
    "storage": "columns, offset table and pools",
    "engine": "arena engine semantics",
    "batch": "jax batched resolution",
}


def pytest_configure(config):
    for name, desc in _MARKER_DESCRIPTIONS.items():
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture
def sample_variants():
    """None | B(i32) | C((i8, u64))."""
    return ea.variant_set("Sample", ["None", ("B", int), ("C", tuple)])


@pytest.fixture
def sample_arena(sample_variants):
    return ea.arena_for(sample_variants, index="u32", generation="u32")


@pytest.fixture
def metrics_on(monkeypatch):
    monkeypatch.setenv("ENUMS_ARENA_METRICS", "1")
    ea.arena_metrics_reset()
    yield
    ea.arena_metrics_reset()
