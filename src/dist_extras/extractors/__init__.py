"""派生アーティファクト（changelog 差分・readme）の抽出オーケストレーター."""

from .changelog import ChangelogExtractor
from .readme import ReadmeExtractor

__all__ = ["ChangelogExtractor", "ReadmeExtractor"]
