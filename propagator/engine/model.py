# -*- coding: utf-8 -*-
"""
エンジンに差し込む「部品」（キー射影・除外関数）と、
それらを束ねた ConstraintModel を定義するモジュールです。

エンジン本体（rules / fixpoint / incremental）は数独のことを知りません。
数独固有の知識はすべて、ここで登録される関数の側にあります。

除外関数が満たすべき契約:
- 全域性   : 候補全体（universe）のどの事実に対しても定義されている
- 非反射性 : 自分自身を除外しない
- 対称性   : A が B を除外するなら、B も A を除外する

契約違反はラウンドの途中ではなく、登録時（validate）に検出します。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence

from ..config import VALIDATE_CLOSED_UNIVERSE, VALIDATE_SYMMETRY
from ..errors import ContractViolationError
from ..logging_utils import get_logger
from ..types import Fact, Key

logger = get_logger(__name__)

# 1 つの事実から、それが禁止する事実の集合を返す純粋関数
ExclusionFunction = Callable[[Fact], Iterable[Fact]]


@dataclass(frozen=True)
class KeyProjection:
    """
    事実からグループキーへの決定的な関数です。

    Attributes
    ----------
    name : str
        射影の名前（"cell", "row_value" など）。モデル内で一意。
    func : callable
        Fact -> Key。
    required : bool
        True の場合、安定状態でキーごとにちょうど 1 件の事実が
        残るべきグループとして、解なし / 未確定 の判定に使います。
    """

    name: str
    func: Callable[[Fact], Key]
    required: bool = True

    def __call__(self, fact: Fact) -> Key:
        return self.func(fact)


class ConstraintModel:
    """
    候補全体・キー射影・除外関数・ルール群をまとめたものです。

    除外関数の結果は validate() の時点で全候補分を計算して
    frozenset として保持します。ラウンド中は表を引くだけです。
    """

    def __init__(
        self,
        universe: Iterable[Fact],
        projections: Sequence[KeyProjection],
        exclusion: ExclusionFunction,
        rules: Optional[Sequence] = None,
        check_symmetry: bool = VALIDATE_SYMMETRY,
        name: str = "model",
    ):
        self.name = name
        self.universe: FrozenSet[Fact] = frozenset(universe)
        self.projections = tuple(projections)
        self.exclusion_func = exclusion
        self.check_symmetry = check_symmetry

        self._exclusions: Dict[Fact, FrozenSet[Fact]] = {}
        self.expected_keys: Dict[str, FrozenSet[Key]] = {}

        self.validate()

        if rules is None:
            from .rules import IntersectionRule

            rules = [IntersectionRule(p, self.exclusion) for p in self.projections]
        self.rules: List = list(rules)

    # ------------------------------------------------------------------
    def projection(self, name: str) -> KeyProjection:
        for p in self.projections:
            if p.name == name:
                return p
        raise KeyError(f"Unknown key projection: {name}")

    def exclusion(self, fact: Fact) -> FrozenSet[Fact]:
        """事前計算した除外集合を返します。"""
        try:
            return self._exclusions[fact]
        except KeyError:
            raise ContractViolationError(
                f"Fact {fact!r} is outside the universe of {self.name}"
            ) from None

    def contains(self, fact: Fact) -> bool:
        return fact in self.universe

    # ------------------------------------------------------------------
    def validate(self) -> None:
        """
        キー射影と除外関数の契約を、候補全体に対して検査します。

        Raises
        ------
        ContractViolationError
            射影名の重複、射影・除外関数の未定義（例外）、
            自己除外、universe 外の事実、非対称な除外を見つけた場合。
        """
        names = [p.name for p in self.projections]
        if len(set(names)) != len(names):
            raise ContractViolationError(f"Duplicate projection names: {names}")
        if not self.projections:
            raise ContractViolationError("At least one key projection is required")

        # キー射影の全域性
        for p in self.projections:
            keys = set()
            for fact in self.universe:
                try:
                    key = p(fact)
                    hash(key)
                except Exception as e:
                    raise ContractViolationError(
                        f"Projection {p.name!r} is undefined for {fact!r}: {e}"
                    ) from e
                keys.add(key)
            self.expected_keys[p.name] = frozenset(keys)

        # 除外関数の全域性・非反射性
        table: Dict[Fact, FrozenSet[Fact]] = {}
        for fact in self.universe:
            try:
                excluded = frozenset(self.exclusion_func(fact))
            except Exception as e:
                raise ContractViolationError(
                    f"Exclusion function is undefined for {fact!r}: {e}"
                ) from e
            if fact in excluded:
                raise ContractViolationError(f"Exclusion of {fact!r} contains the fact itself")
            if VALIDATE_CLOSED_UNIVERSE:
                outside = excluded - self.universe
                if outside:
                    raise ContractViolationError(
                        f"Exclusion of {fact!r} names facts outside the universe: "
                        f"{sorted(outside, key=repr)[:5]}"
                    )
            table[fact] = excluded

        # 対称性
        if self.check_symmetry:
            for fact, excluded in table.items():
                for other in excluded:
                    if other in table and fact not in table[other]:
                        raise ContractViolationError(
                            f"Exclusion is not symmetric: {fact!r} excludes {other!r} but not vice versa"
                        )

        self._exclusions = table
        logger.debug(
            "Validated %s: %d facts, projections=%s",
            self.name, len(self.universe), names,
        )
