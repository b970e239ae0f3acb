"""パッケージバージョンと派生アーティファクトのデータモデル."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, NamedTuple

DIST_CHANGELOG_URL_KEY = "distChangelogUrl"
DIST_README_URL_KEY = "distReadmeUrl"


@dataclass(frozen=True)
class PackageVersion:
    """1パッケージの1公開バージョン.

    上流で生成された値をそのまま受け取り、このプロジェクトは metadata（composer の
    ``extra``）に2つのキーを書き込むだけです。インスタンスは不変で、書き込みは
    ``with_metadata`` が返す新しいインスタンスで表現します。

    Attributes:
        name: パッケージ名（例: "vendor/pkg"）
        version: 正規化済みバージョン（順序比較に使用）
        pretty_version: 表示用バージョン（ファイル名に使用）
        dist_url: 一次アーカイブの公開URL
        dist_type: 一次アーカイブの形式（例: "zip"）
        metadata: パッケージの extra マッピング
    """

    name: str
    version: str
    pretty_version: str
    dist_url: str
    dist_type: str = "zip"
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def with_metadata(self, key: str, value: Any) -> PackageVersion:
        """metadata の1キーを置き換えた新しいインスタンスを返す."""
        return replace(self, metadata={**self.metadata, key: value})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PackageVersion:
        """composer 形式のパッケージ辞書から生成する.

        Args:
            data: ``name``/``version``/``version_normalized``/``dist``/``extra`` を持つ辞書

        Raises:
            ValueError: name または version が無い場合
        """
        name = data.get("name")
        pretty_version = data.get("version")
        if not name or not pretty_version:
            msg = f"Package entry requires 'name' and 'version': {dict(data)}"
            raise ValueError(msg)

        dist = data.get("dist") or {}
        return cls(
            name=str(name),
            version=str(data.get("version_normalized") or pretty_version),
            pretty_version=str(pretty_version),
            dist_url=str(dist.get("url", "")),
            dist_type=str(dist.get("type", "zip")),
            metadata=dict(data.get("extra") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        """composer 形式のパッケージ辞書に変換する."""
        return {
            "name": self.name,
            "version": self.pretty_version,
            "version_normalized": self.version,
            "dist": {"url": self.dist_url, "type": self.dist_type},
            "extra": dict(self.metadata),
        }


class VersionPair(NamedTuple):
    """changelog 差分計算の単位（current と、その直前バージョン）."""

    current: PackageVersion
    previous: PackageVersion | None


@dataclass(frozen=True)
class ArtifactEffect:
    """オーケストレーターの1判断の記録（レポート出力用）.

    action は "written" / "reused" / "skipped" / "failed" のいずれか。
    """

    package: str
    version: str
    artifact: str
    action: str
    note: str = ""


@dataclass(frozen=True)
class ExtractionResult:
    """オーケストレーターの戻り値.

    Attributes:
        packages: 入力と同じ順序の更新済みパッケージ列
        effects: 判断ごとの記録
    """

    packages: list[PackageVersion]
    effects: list[ArtifactEffect]


def replace_package(
    packages: list[PackageVersion], old: PackageVersion, new: PackageVersion
) -> None:
    """packages 内で old と同一のオブジェクトを new に置き換える（位置は維持）."""
    for index, candidate in enumerate(packages):
        if candidate is old:
            packages[index] = new
