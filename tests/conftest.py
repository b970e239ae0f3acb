from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from dist_extras.adapters.base_adapter import BaseExtractor
from dist_extras.adapters.filesystem import LocalFilesystem
from dist_extras.core.exceptions import ExtractionError
from dist_extras.core.models import PackageVersion
from dist_extras.core.paths import DistPathResolver
from dist_extras.core.workspace import WorkspaceFactory

DIST_BASE_URL = "https://repo.example.com/dist"


class FakeExtractor(BaseExtractor):
    """アーカイブパス → {ファイル名: 内容} の辞書から展開結果を作る."""

    def __init__(self, contents: dict[Path, dict[str, str]] | None = None) -> None:
        self.contents = contents or {}
        self.calls: list[tuple[Path, Path]] = []

    def add(self, archive_path: Path, files: dict[str, str]) -> None:
        self.contents[archive_path] = files

    def extract(self, archive_path: Path, dest_dir: Path) -> None:
        self.calls.append((archive_path, dest_dir))
        if archive_path not in self.contents:
            raise ExtractionError(archive_path, "archive not found")
        dest_dir.mkdir(parents=True, exist_ok=True)
        for name, text in self.contents[archive_path].items():
            target = dest_dir / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")

    @property
    def extracted_archives(self) -> list[Path]:
        return [archive for archive, _ in self.calls]

    @property
    def workspaces(self) -> list[Path]:
        return [dest for _, dest in self.calls]


def _make_package(
    name: str = "vendor/pkg",
    version: str = "1.0.0",
    metadata: dict | None = None,
    dist_type: str = "zip",
) -> PackageVersion:
    flat = name.replace("/", "-")
    return PackageVersion(
        name=name,
        version=version,
        pretty_version=version,
        dist_url=f"{DIST_BASE_URL}/{name}/{flat}-{version}.{dist_type}",
        dist_type=dist_type,
        metadata=metadata or {},
    )


@pytest.fixture
def output_root(tmp_path: Path) -> Path:
    root = tmp_path / "out"
    root.mkdir()
    return root


@pytest.fixture
def resolver(output_root: Path) -> DistPathResolver:
    return DistPathResolver(output_root)


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def filesystem() -> LocalFilesystem:
    return LocalFilesystem()


@pytest.fixture
def workspaces(tmp_path: Path, fake_extractor: FakeExtractor, filesystem: LocalFilesystem) -> WorkspaceFactory:
    counter = itertools.count(1)
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    return WorkspaceFactory(
        fake_extractor,
        filesystem,
        id_generator=lambda: f"{next(counter):04d}",
        temp_root=temp_root,
    )


@pytest.fixture
def make_package():
    return _make_package
