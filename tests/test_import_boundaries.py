from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType

ROOT = Path(__file__).resolve().parents[1]


def _load_checker_module() -> ModuleType:
    module_path = ROOT / "tools" / "check_imports.py"
    spec = importlib.util.spec_from_file_location("check_imports_tool", module_path)
    assert spec is not None
    loader = spec.loader
    assert loader is not None
    module = importlib.util.module_from_spec(spec)
    loader.exec_module(module)
    return module


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_core_may_import_domain(tmp_path: Path) -> None:
    checker = _load_checker_module()
    source_root = tmp_path / "src" / "playlist_stories"
    core_file = source_root / "core" / "outline.py"
    _write(core_file, "from playlist_stories.domain.models import Chunk\n")
    assert checker.check_file(core_file, source_root) == []


def test_core_must_not_import_adapters(tmp_path: Path) -> None:
    checker = _load_checker_module()
    source_root = tmp_path / "src" / "playlist_stories"
    core_file = source_root / "core" / "stages.py"
    _write(core_file, "from playlist_stories.adapters.artifact_store import FileArtifactStore\n")
    violations = checker.check_file(core_file, source_root)
    assert len(violations) == 1
    assert "core must not import playlist_stories.adapters" in violations[0]


def test_relative_import_into_application_is_caught(tmp_path: Path) -> None:
    checker = _load_checker_module()
    source_root = tmp_path / "src" / "playlist_stories"
    core_file = source_root / "core" / "stages.py"
    _write(core_file, "from ..application import settings\n")
    violations = checker.check_file(core_file, source_root)
    assert violations and "core must not import playlist_stories.application" in violations[0]


def test_domain_must_not_import_core(tmp_path: Path) -> None:
    checker = _load_checker_module()
    source_root = tmp_path / "src" / "playlist_stories"
    domain_file = source_root / "domain" / "ports.py"
    _write(domain_file, "import playlist_stories.core.stages\n")
    assert checker.check_file(domain_file, source_root)


def test_adapters_may_import_core(tmp_path: Path) -> None:
    checker = _load_checker_module()
    source_root = tmp_path / "src" / "playlist_stories"
    adapter_file = source_root / "adapters" / "tokenizer.py"
    _write(adapter_file, "from playlist_stories.core.token_budget import TokenCounter\n")
    assert checker.check_file(adapter_file, source_root) == []


def test_project_tree_respects_layer_boundaries() -> None:
    checker = _load_checker_module()
    assert checker.check_import_boundaries() == []
