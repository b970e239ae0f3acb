"""パッケージバージョン間の changelog 差分を抽出する.

各パッケージのバージョンを古い順に並べ、直前のバージョンとの差分を
``changelog-{pretty_version}.md`` として一次アーカイブの隣に書き出し、
公開URLを ``distChangelogUrl`` に記録する。
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from dist_extras.adapters.base_adapter import BaseDiffEngine, BaseExtractor, BaseFilesystem
from dist_extras.adapters.diff_engine import LineDiffEngine
from dist_extras.adapters.filesystem import LocalFilesystem
from dist_extras.core.exceptions import ExtractionError, MissingSourceFileError
from dist_extras.core.models import (
    DIST_CHANGELOG_URL_KEY,
    ArtifactEffect,
    ExtractionResult,
    PackageVersion,
    VersionPair,
    replace_package,
)
from dist_extras.core.paths import (
    CHANGELOG_SOURCE_FILENAME,
    DistPathResolver,
    changelog_filename,
    published_url,
)
from dist_extras.core.skipper import UnmodifiedSkipper
from dist_extras.core.versions import VersionPairBuilder
from dist_extras.core.workspace import WorkspaceFactory

ARTIFACT = "changelog"
WORKSPACE_PREFIX = "changelog_extractor"


class ChangelogExtractor:
    """changelog 差分のオーケストレーター.

    Args:
        resolver: パス解決器
        extractor: アーカイブ展開器
        diff_engine: 差分エンジン（省略時は LineDiffEngine）
        filesystem: ファイル操作サービス（省略時は LocalFilesystem）
        pair_builder: バージョンペア生成器（順序の差し替え用）
        skipper: 指定時は処理済みバージョンの再計算を省略する
        workspaces: ワークスペース生成器（省略時は extractor/filesystem から作る）
    """

    def __init__(
        self,
        resolver: DistPathResolver,
        extractor: BaseExtractor,
        diff_engine: BaseDiffEngine | None = None,
        filesystem: BaseFilesystem | None = None,
        pair_builder: VersionPairBuilder | None = None,
        skipper: UnmodifiedSkipper | None = None,
        workspaces: WorkspaceFactory | None = None,
    ) -> None:
        self.resolver = resolver
        self.diff_engine = diff_engine or LineDiffEngine()
        self.filesystem = filesystem or LocalFilesystem()
        self.pair_builder = pair_builder or VersionPairBuilder()
        self.skipper = skipper
        self.workspaces = workspaces or WorkspaceFactory(extractor, self.filesystem)

    def extract(self, packages: Iterable[PackageVersion]) -> ExtractionResult:
        """全バージョンペアについて changelog 差分を書き出す.

        1ペアの失敗はログに残して次のペアへ進む（バッチ全体は中断しない）。

        Returns:
            入力と同じ順序の更新済みパッケージ列と、判断ごとの記録
        """
        updated = list(packages)
        effects: list[ArtifactEffect] = []
        pairs = self.pair_builder.build(updated)

        logger.info(f"Extracting changelogs for {len(pairs)} package versions")

        for pair in pairs:
            current = pair.current
            try:
                url = self._process_pair(pair, effects)
            except MissingSourceFileError as e:
                logger.warning(f"Skipping changelog for {current.name} {current.pretty_version}: {e}")
                effects.append(self._effect(current, "skipped", str(e)))
                continue
            except (ExtractionError, OSError) as e:
                logger.error(f"Changelog extraction failed for {current.name} {current.pretty_version}: {e}")
                effects.append(self._effect(current, "failed", str(e)))
                continue

            if not url:
                continue
            replace_package(updated, current, current.with_metadata(DIST_CHANGELOG_URL_KEY, url))

        return ExtractionResult(packages=updated, effects=effects)

    def _process_pair(self, pair: VersionPair, effects: list[ArtifactEffect]) -> str | None:
        current, previous = pair
        filename = changelog_filename(current.pretty_version)
        url = published_url(current.dist_url, filename)

        if self.skipper is not None and self.skipper.is_skippable(current):
            logger.debug(f"Changelog already built for {current.name} {current.pretty_version}")
            effects.append(self._effect(current, "reused", url))
            return url

        target = self.resolver.artifact_dir(current) / filename

        with self.workspaces.extracted(self.resolver.dist_path(current), WORKSPACE_PREFIX) as current_dir:
            current_source = self._locate_source(current_dir)

            if previous is None:
                self.filesystem.copy(current_source, target)
                note = "full changelog"
            else:
                with self.workspaces.extracted(
                    self.resolver.dist_path(previous), WORKSPACE_PREFIX
                ) as previous_dir:
                    previous_source = self._locate_source(previous_dir)
                    diff = self.diff_engine.compare_files(previous_source, current_source)
                    self.filesystem.write_bytes(target, self.diff_engine.to_raw(diff))
                note = f"diff against {previous.pretty_version}"
                if diff.is_empty:
                    note += ", identical changelog"

        logger.info(f"Wrote {target} ({note})")
        effects.append(self._effect(current, "written", note))
        return url

    def _locate_source(self, workspace: Path) -> Path:
        source = workspace / CHANGELOG_SOURCE_FILENAME
        if not self.filesystem.exists(source):
            raise MissingSourceFileError(workspace, CHANGELOG_SOURCE_FILENAME)
        return source

    @staticmethod
    def _effect(package: PackageVersion, action: str, note: str = "") -> ArtifactEffect:
        return ArtifactEffect(package.name, package.pretty_version, ARTIFACT, action, note)
