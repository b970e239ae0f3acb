"""派生アーティファクト生成のコア処理群.

- パス解決（一次アーカイブ → 派生アーティファクト・公開URL）
- バージョン順序とペア生成
- スキップ判定・ワークスペース管理
"""

from .exceptions import DistExtrasError, ExtractionError, MissingSourceFileError
from .models import ArtifactEffect, ExtractionResult, PackageVersion, VersionPair
from .paths import DistPathResolver, changelog_filename, published_url, resolve_dist_path
from .versions import SemverOrder, VersionOrder, VersionPairBuilder

__all__ = [
    "DistExtrasError",
    "ExtractionError",
    "MissingSourceFileError",
    "ArtifactEffect",
    "ExtractionResult",
    "PackageVersion",
    "VersionPair",
    "DistPathResolver",
    "changelog_filename",
    "published_url",
    "resolve_dist_path",
    "SemverOrder",
    "VersionOrder",
    "VersionPairBuilder",
]
