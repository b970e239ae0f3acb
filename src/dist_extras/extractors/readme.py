"""パッケージの readme を抽出する.

パッケージごとに最も新しいバージョンのアーカイブから readme を取り出し、
一次アーカイブと同じディレクトリに ``readme.md`` として置き、
公開URLを ``distReadmeUrl`` に記録する。
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from dist_extras.adapters.base_adapter import BaseExtractor, BaseFilesystem
from dist_extras.adapters.filesystem import LocalFilesystem
from dist_extras.core.exceptions import ExtractionError
from dist_extras.core.models import (
    DIST_README_URL_KEY,
    ArtifactEffect,
    ExtractionResult,
    PackageVersion,
    replace_package,
)
from dist_extras.core.paths import README_FILENAME, DistPathResolver, published_url
from dist_extras.core.skipper import UnmodifiedSkipper
from dist_extras.core.versions import SemverOrder, VersionOrder
from dist_extras.core.workspace import WorkspaceFactory

ARTIFACT = "readme"
WORKSPACE_PREFIX = "readme_extractor"
README_OVERRIDE_KEY = "readme"


class ReadmeExtractor:
    """readme のオーケストレーター.

    Args:
        resolver: パス解決器
        extractor: アーカイブ展開器
        filesystem: ファイル操作サービス（省略時は LocalFilesystem）
        order: バージョン順序（省略時は SemverOrder）
        skipper: 処理済み判定（省略時は resolver/filesystem から作る）
        workspaces: ワークスペース生成器
    """

    def __init__(
        self,
        resolver: DistPathResolver,
        extractor: BaseExtractor,
        filesystem: BaseFilesystem | None = None,
        order: VersionOrder | None = None,
        skipper: UnmodifiedSkipper | None = None,
        workspaces: WorkspaceFactory | None = None,
    ) -> None:
        self.resolver = resolver
        self.filesystem = filesystem or LocalFilesystem()
        self.order = order or SemverOrder()
        self.skipper = skipper or UnmodifiedSkipper(resolver, self.filesystem)
        self.workspaces = workspaces or WorkspaceFactory(extractor, self.filesystem)

    def extract(self, packages: Iterable[PackageVersion]) -> ExtractionResult:
        """各パッケージの readme を書き出し、distReadmeUrl を設定する.

        1パッケージの失敗はログに残して次のパッケージへ進む。
        """
        logger.info("Extracting readme.md from packages")

        updated = list(packages)
        effects: list[ArtifactEffect] = []

        for package in self.resolve_versions(updated).values():
            try:
                url = self._extract_by_version(package, effects)
            except (ExtractionError, OSError) as e:
                logger.error(f"Readme extraction failed for {package.name} {package.pretty_version}: {e}")
                effects.append(self._effect(package, "failed", str(e)))
                continue

            if not url:
                continue
            replace_package(updated, package, package.with_metadata(DIST_README_URL_KEY, url))

        return ExtractionResult(packages=updated, effects=effects)

    def resolve_versions(self, packages: Iterable[PackageVersion]) -> dict[str, PackageVersion]:
        """パッケージごとに readme の取り出し元となるバージョンを選ぶ.

        処理済み（スキップ可能）なバージョンは候補から外し、残りの中で最初に現れた
        ものを、後から現れた version が厳密に大きい場合にだけ置き換える。
        全バージョンが処理済みのパッケージは最大のバージョンを選ぶ（URLの再設定のみ）。
        """
        selected: dict[str, PackageVersion] = {}
        built: dict[str, PackageVersion] = {}

        for package in packages:
            pool = built if self.skipper.is_skippable(package) else selected
            best = pool.get(package.name)
            if best is None or self.order.compare(package.version, best.version) > 0:
                pool[package.name] = package

        for name, package in built.items():
            selected.setdefault(name, package)
        return selected

    def _extract_by_version(self, package: PackageVersion, effects: list[ArtifactEffect]) -> str | None:
        dist_path = self.resolver.dist_path(package)
        url = published_url(package.dist_url, README_FILENAME)

        if self.skipper.is_skippable(package):
            logger.debug(f"Readme already built for {package.name} {package.pretty_version}")
            effects.append(self._effect(package, "reused", url))
            return url

        logger.info(
            f"Extracting {README_FILENAME} from package '{package.name}' "
            f"with highest version '{package.pretty_version}'"
        )

        readme_relative = str(package.metadata.get(README_OVERRIDE_KEY) or README_FILENAME)
        with self.workspaces.extracted(dist_path, WORKSPACE_PREFIX) as workspace:
            source = (workspace / readme_relative).resolve()
            # ワークスペース外を指す readme 指定は存在しないものとして扱う
            inside = source.is_relative_to(workspace.resolve())
            if inside and self.filesystem.exists(source):
                self.filesystem.copy(source, self.resolver.readme_path(package))
                effects.append(self._effect(package, "written", readme_relative))
            else:
                # コピーの有無に関わらず URL は設定する
                reason = "not found" if inside else "outside the archive"
                logger.warning(
                    f"Readme '{readme_relative}' {reason} in {package.name} {package.pretty_version}"
                )
                effects.append(self._effect(package, "skipped", f"{readme_relative} {reason}"))

        return url

    @staticmethod
    def _effect(package: PackageVersion, action: str, note: str = "") -> ArtifactEffect:
        return ArtifactEffect(package.name, package.pretty_version, ARTIFACT, action, note)
