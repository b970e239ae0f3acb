"""未変更パッケージのスキップ判定."""

from __future__ import annotations

from loguru import logger

from dist_extras.adapters.base_adapter import BaseFilesystem
from dist_extras.adapters.filesystem import LocalFilesystem

from .models import PackageVersion
from .paths import DistPathResolver


class UnmodifiedSkipper:
    """前回のビルドで処理済みのバージョンを判定する.

    一次アーカイブ・同じディレクトリの readme.md・changelog-{pretty_version}.md の
    3つが全て存在すれば処理済み（スキップ可能）とみなす。
    """

    def __init__(self, resolver: DistPathResolver, filesystem: BaseFilesystem | None = None) -> None:
        self.resolver = resolver
        self.filesystem = filesystem or LocalFilesystem()

    def is_skippable(self, package: PackageVersion) -> bool:
        """処理済みなら True.

        存在確認自体が失敗した場合は再処理させるため False を返す。
        """
        expected = (
            self.resolver.dist_path(package),
            self.resolver.readme_path(package),
            self.resolver.changelog_path(package),
        )
        try:
            return all(self.filesystem.exists(path) for path in expected)
        except OSError as e:
            logger.warning(f"Skip check failed for {package.name} {package.pretty_version}: {e}")
            return False
