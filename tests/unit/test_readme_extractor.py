"""Unit tests for ReadmeExtractor."""

from __future__ import annotations

from pathlib import Path

from dist_extras.adapters.filesystem import LocalFilesystem
from dist_extras.core.paths import DistPathResolver
from dist_extras.core.workspace import WorkspaceFactory
from dist_extras.extractors.readme import ReadmeExtractor

README_URL = "https://repo.example.com/dist/vendor/pkg/readme.md"


def _touch(path: Path, text: str = "built") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _mark_built(resolver: DistPathResolver, package) -> None:
    _touch(resolver.dist_path(package))
    _touch(resolver.readme_path(package))
    _touch(resolver.changelog_path(package))


class TestResolveVersions:
    def test_selects_highest_version(
        self, resolver: DistPathResolver, fake_extractor, workspaces: WorkspaceFactory, make_package
    ) -> None:
        """[1.0.0, 1.2.0, 1.1.0] から 1.2.0 が選ばれること."""
        packages = [make_package("vendor/pkg", v) for v in ["1.0.0", "1.2.0", "1.1.0"]]

        selected = ReadmeExtractor(resolver, fake_extractor, workspaces=workspaces).resolve_versions(packages)

        assert selected["vendor/pkg"].version == "1.2.0"

    def test_first_seen_wins_on_tie(
        self, resolver: DistPathResolver, fake_extractor, workspaces: WorkspaceFactory, make_package
    ) -> None:
        first = make_package("vendor/pkg", "1.0.0", metadata={"n": 1})
        second = make_package("vendor/pkg", "1.0.0", metadata={"n": 2})

        selected = ReadmeExtractor(resolver, fake_extractor, workspaces=workspaces).resolve_versions(
            [first, second]
        )

        assert selected["vendor/pkg"] is first

    def test_skippable_versions_are_not_candidates(
        self, resolver: DistPathResolver, fake_extractor, workspaces: WorkspaceFactory, make_package
    ) -> None:
        """処理済みのバージョンは、未処理のバージョンがあれば選ばれないこと."""
        built = make_package("vendor/pkg", "2.0.0")
        fresh = make_package("vendor/pkg", "1.5.0")
        _mark_built(resolver, built)

        selected = ReadmeExtractor(resolver, fake_extractor, workspaces=workspaces).resolve_versions(
            [built, fresh]
        )

        assert selected["vendor/pkg"] is fresh

    def test_all_skippable_selects_highest(
        self, resolver: DistPathResolver, fake_extractor, workspaces: WorkspaceFactory, make_package
    ) -> None:
        v1 = make_package("vendor/pkg", "1.0.0")
        v2 = make_package("vendor/pkg", "2.0.0")
        _mark_built(resolver, v1)
        _mark_built(resolver, v2)

        selected = ReadmeExtractor(resolver, fake_extractor, workspaces=workspaces).resolve_versions([v2, v1])

        assert selected["vendor/pkg"] is v2


class TestReadmeExtractor:
    def test_extracts_from_highest_version(
        self, resolver: DistPathResolver, fake_extractor, workspaces: WorkspaceFactory, make_package
    ) -> None:
        packages = [make_package("vendor/pkg", v) for v in ["1.0.0", "1.2.0", "1.1.0"]]
        for package in packages:
            fake_extractor.add(resolver.dist_path(package), {"readme.md": f"readme {package.version}"})

        result = ReadmeExtractor(resolver, fake_extractor, workspaces=workspaces).extract(packages)

        assert fake_extractor.extracted_archives == [resolver.dist_path(packages[1])]
        assert resolver.readme_path(packages[1]).read_text(encoding="utf-8") == "readme 1.2.0"
        assert result.packages[1].metadata["distReadmeUrl"] == README_URL
        assert "distReadmeUrl" not in result.packages[0].metadata
        assert "distReadmeUrl" not in result.packages[2].metadata

    def test_readme_override_from_metadata(
        self, resolver: DistPathResolver, fake_extractor, workspaces: WorkspaceFactory, make_package
    ) -> None:
        """metadata の readme キーで指定したファイルをコピーすること."""
        package = make_package("vendor/pkg", "1.0.0", metadata={"readme": "docs/README.md"})
        fake_extractor.add(
            resolver.dist_path(package),
            {"readme.md": "root readme", "docs/README.md": "docs readme"},
        )

        ReadmeExtractor(resolver, fake_extractor, workspaces=workspaces).extract([package])

        assert resolver.readme_path(package).read_text(encoding="utf-8") == "docs readme"

    def test_readme_override_outside_workspace_is_skipped(
        self,
        resolver: DistPathResolver,
        fake_extractor,
        workspaces: WorkspaceFactory,
        tmp_path: Path,
        make_package,
    ) -> None:
        """ワークスペースの外を指す readme 指定はコピーせず skipped になること."""
        _touch(tmp_path / "tmp" / "outside.md", "secret")
        package = make_package("vendor/pkg", "1.0.0", metadata={"readme": "../outside.md"})
        fake_extractor.add(resolver.dist_path(package), {"readme.md": "root readme"})

        result = ReadmeExtractor(resolver, fake_extractor, workspaces=workspaces).extract([package])

        assert not resolver.readme_path(package).exists()
        assert result.packages[0].metadata["distReadmeUrl"] == README_URL
        assert result.effects[0].action == "skipped"
        assert "outside the archive" in result.effects[0].note

    def test_url_is_set_even_without_readme(
        self, resolver: DistPathResolver, fake_extractor, workspaces: WorkspaceFactory, make_package
    ) -> None:
        package = make_package("vendor/pkg", "1.0.0")
        fake_extractor.add(resolver.dist_path(package), {"changelog.md": "only changelog"})

        result = ReadmeExtractor(resolver, fake_extractor, workspaces=workspaces).extract([package])

        assert not resolver.readme_path(package).exists()
        assert result.packages[0].metadata["distReadmeUrl"] == README_URL
        assert result.effects[0].action == "skipped"

    def test_workspace_removed_when_copy_fails(
        self, resolver: DistPathResolver, fake_extractor, tmp_path: Path, make_package
    ) -> None:
        """コピー失敗時もワークスペースが削除され、URLは書かれないこと."""

        class FailingCopyFilesystem(LocalFilesystem):
            def copy(self, src: Path, dst: Path) -> None:
                raise OSError("disk full")

        filesystem = FailingCopyFilesystem()
        workspaces = WorkspaceFactory(fake_extractor, filesystem, temp_root=tmp_path)
        package = make_package("vendor/pkg", "1.0.0")
        fake_extractor.add(resolver.dist_path(package), {"readme.md": "hello"})

        result = ReadmeExtractor(
            resolver, fake_extractor, filesystem=filesystem, workspaces=workspaces
        ).extract([package])

        assert "distReadmeUrl" not in result.packages[0].metadata
        assert result.effects[0].action == "failed"
        assert not fake_extractor.workspaces[0].exists()

    def test_extraction_failure_continues_with_next_package(
        self, resolver: DistPathResolver, fake_extractor, workspaces: WorkspaceFactory, make_package
    ) -> None:
        broken = make_package("vendor/broken", "1.0.0")
        ok = make_package("vendor/pkg", "1.0.0")
        fake_extractor.add(resolver.dist_path(ok), {"readme.md": "ok"})

        result = ReadmeExtractor(resolver, fake_extractor, workspaces=workspaces).extract([broken, ok])

        assert "distReadmeUrl" not in result.packages[0].metadata
        assert result.packages[1].metadata["distReadmeUrl"] == README_URL

    def test_second_run_is_idempotent(
        self, resolver: DistPathResolver, fake_extractor, workspaces: WorkspaceFactory, make_package
    ) -> None:
        """2回目の実行では展開せず、同じ distReadmeUrl を設定すること."""
        package = make_package("vendor/pkg", "1.0.0")
        _touch(resolver.dist_path(package))
        _touch(resolver.changelog_path(package))
        fake_extractor.add(resolver.dist_path(package), {"readme.md": "hello"})
        extractor = ReadmeExtractor(resolver, fake_extractor, workspaces=workspaces)

        first = extractor.extract([package])
        calls_after_first = len(fake_extractor.calls)
        second = extractor.extract([package])

        assert calls_after_first == 1
        assert len(fake_extractor.calls) == 1
        assert first.packages[0].metadata["distReadmeUrl"] == README_URL
        assert second.packages[0].metadata["distReadmeUrl"] == README_URL
        assert second.effects[0].action == "reused"
