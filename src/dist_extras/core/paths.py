"""一次アーカイブと派生アーティファクトのパス解決.

ディスク上のパスも公開URLも、同じ命名規則から導出します::

    {base}/{name}/{name の "/" を "-" に置換}-{version}.{dist_type}
    {archive-dir}/readme.md
    {archive-dir}/changelog-{pretty_version}.md
"""

from __future__ import annotations

import posixpath
from pathlib import Path

from .models import PackageVersion

README_FILENAME = "readme.md"
CHANGELOG_SOURCE_FILENAME = "changelog.md"


def resolve_dist_path(
    package_name: str,
    version: str,
    dist_type: str,
    output_root: Path | str,
    base_dir_override: Path | str | None = None,
) -> Path:
    """一次アーカイブのディスク上のパスを返す（I/Oなし）.

    Args:
        package_name: パッケージ名（例: "vendor/pkg"）
        version: ファイル名に入れるバージョン
        dist_type: アーカイブ形式（拡張子）
        output_root: ビルド出力ディレクトリ
        base_dir_override: 設定されていれば output_root の代わりに使う

    Returns:
        例: ``/out/dist/vendor/pkg/vendor-pkg-1.0.0.zip``
    """
    base = Path(base_dir_override) if base_dir_override else Path(output_root)
    flat_name = package_name.replace("/", "-")
    return base / package_name / f"{flat_name}-{version}.{dist_type}"


def changelog_filename(pretty_version: str) -> str:
    return f"changelog-{pretty_version}.md"


def published_url(dist_url: str, filename: str) -> str:
    """公開URL: dist_url のディレクトリ部分 + "/" + filename."""
    return f"{posixpath.dirname(dist_url)}/{filename}"


class DistPathResolver:
    """出力先設定を束ねたパス解決器.

    派生アーティファクトはすべて一次アーカイブと同じディレクトリに置かれます。
    """

    def __init__(
        self, output_root: Path | str, base_dir_override: Path | str | None = None
    ) -> None:
        self.output_root = Path(output_root)
        self.base_dir_override = Path(base_dir_override) if base_dir_override else None

    def dist_path(self, package: PackageVersion) -> Path:
        return resolve_dist_path(
            package.name,
            package.pretty_version,
            package.dist_type,
            self.output_root,
            self.base_dir_override,
        )

    def artifact_dir(self, package: PackageVersion) -> Path:
        return self.dist_path(package).parent

    def readme_path(self, package: PackageVersion) -> Path:
        return self.artifact_dir(package) / README_FILENAME

    def changelog_path(self, package: PackageVersion) -> Path:
        return self.artifact_dir(package) / changelog_filename(package.pretty_version)
