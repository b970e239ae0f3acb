"""dist_extras: 静的パッケージリポジトリ向けの派生アーティファクト生成.

ビルド済みの一次アーカイブから changelog 差分と readme を取り出し、
公開URLをパッケージのメタデータに書き戻す。
"""

from dist_extras.builder import enrich_packages, enrich_repository
from dist_extras.core.models import PackageVersion

__version__ = "0.1.0"

__all__ = [
    "enrich_packages",
    "enrich_repository",
    "PackageVersion",
]
