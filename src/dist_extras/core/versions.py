"""バージョン順序と changelog 差分用のバージョンペア生成.

バージョン文字列の解析は ``packaging`` に任せ、ここでは順序キーへの変換と
「パッケージごとのグループ化 → 昇順ソート → (current, previous) の列挙」だけを担う。
"""

from __future__ import annotations

import functools
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from packaging.version import InvalidVersion, Version

from .models import PackageVersion, VersionPair

Identifier = tuple[int, int | str]
VersionKey = tuple[int, tuple[int, ...], int, tuple[Identifier, ...]]

_DEV, _PRE_RELEASE, _RELEASE, _POST = range(4)

PRE_LABELS = {"a": "alpha", "b": "beta", "rc": "rc"}

_NUMERIC_CORE_RE = re.compile(r"^[vV]?(\d+(?:\.\d+)*)(.*)$")
_POST_LABEL_RE = re.compile(r"^(?:patch|pl|p)\d*$")


def _strip_zeros(release: tuple[int, ...]) -> tuple[int, ...]:
    """末尾の0を除く（1.0 == 1.0.0 == 1.0.0.0）."""
    end = len(release)
    while end > 1 and release[end - 1] == 0:
        end -= 1
    return tuple(release[:end])


def _identifier(part: str) -> Identifier:
    return (0, int(part)) if part.isdecimal() else (1, part)


def _fallback_key(version: str) -> VersionKey:
    """PEP 440 で解釈できない文字列のキー."""
    match = _NUMERIC_CORE_RE.match(version.strip())
    if match is None:
        return (0, (), _DEV, ((1, version),))

    release = (0, *_strip_zeros(tuple(int(part) for part in match.group(1).split("."))))
    tail = match.group(2).split("+", 1)[0].strip("-._").lower()
    if not tail:
        return (1, release, _RELEASE, ())

    identifiers = tuple(_identifier(part) for part in re.split(r"[-._]", tail) if part)
    if _POST_LABEL_RE.match(tail.split(".", 1)[0].split("-", 1)[0]):
        return (1, release, _POST, identifiers)
    if tail.startswith("dev"):
        return (1, release, _DEV, identifiers)
    return (1, release, _PRE_RELEASE, identifiers)


class VersionOrder(ABC):
    """バージョン文字列の全順序."""

    @abstractmethod
    def compare(self, a: str, b: str) -> int:
        """a < b なら負、a == b なら0、a > b なら正を返す."""
        ...

    def sort_key(self) -> Any:
        return functools.cmp_to_key(self.compare)


class SemverOrder(VersionOrder):
    """セマンティックバージョンの優先順位に従う順序.

    数値部分（例: 1.2.0）を先に比較し、同じなら
    dev < プレリリース < リリース < パッチ（post）の順に並べる。
    プレリリース識別子は "." 区切りで、数値は数値として、英字は文字列として比較する
    （数値 < 英字）。``packaging.version.Version`` で解釈できるものはその解析結果を使い、
    PEP 440 に無い表記（例: "2.0.0-snapshot", "1.0.0-alpha.beta", "1.0.0.0-patch1"）は
    数値部分と残りに分けて同じ形のキーにする。
    数値部分を持たない文字列（例: "dev-master"）だけが全バージョンより前に並び、
    それら同士は文字列順で比較する。
    """

    @staticmethod
    def key(version: str) -> VersionKey:
        try:
            parsed = Version(version)
        except InvalidVersion:
            return _fallback_key(version)

        release = (parsed.epoch, *_strip_zeros(parsed.release))
        if parsed.pre is not None:
            label, number = parsed.pre
            return (1, release, _PRE_RELEASE, (_identifier(PRE_LABELS[label]), (0, number)))
        if parsed.dev is not None:
            return (1, release, _DEV, ((0, parsed.dev),))
        if parsed.post is not None:
            return (1, release, _POST, ((0, parsed.post),))
        return (1, release, _RELEASE, ())

    def compare(self, a: str, b: str) -> int:
        key_a, key_b = self.key(a), self.key(b)
        if key_a < key_b:
            return -1
        if key_a > key_b:
            return 1
        return 0

    def sort_key(self) -> Any:
        return self.key


class VersionPairBuilder:
    """パッケージのバージョン列から changelog 差分用のペアを作る."""

    def __init__(self, order: VersionOrder | None = None) -> None:
        self.order = order or SemverOrder()

    def group(self, packages: Iterable[PackageVersion]) -> dict[str, list[PackageVersion]]:
        """パッケージ名ごとにグループ化し、各グループを昇順に並べる.

        重複は除去しない。同順位のバージョンは入力順を保つ（sorted は安定ソート）。
        """
        index: dict[str, list[PackageVersion]] = {}
        for package in packages:
            index.setdefault(package.name, []).append(package)

        key = self.order.sort_key()
        return {
            name: sorted(versions, key=lambda p: key(p.version))
            for name, versions in index.items()
        }

    def build(self, packages: Iterable[PackageVersion]) -> list[VersionPair]:
        """(current, previous) のペアを古い順に返す.

        各パッケージの最初のペアは previous=None になる。
        """
        pairs: list[VersionPair] = []
        for versions in self.group(packages).values():
            previous: PackageVersion | None = None
            for version in versions:
                pairs.append(VersionPair(version, previous))
                previous = version
        return pairs
