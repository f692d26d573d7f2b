from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Optional

from abadvisor.services.experiments.formatting import format_p, format_pct, format_rate

if TYPE_CHECKING:
    from abadvisor.services.experiments.decision import VariantResult


class SummaryOutcome:
    """One of a closed set of outcomes, each rendering a single summary sentence."""

    kind: ClassVar[str]

    def render(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Winner(SummaryOutcome):
    name: str
    rate: float
    lift_rel: Optional[float]
    p_value: float

    kind: ClassVar[str] = "winner"

    def render(self) -> str:
        return (
            f"Variant {self.name} wins with an {format_rate(self.rate)}% rate, "
            f"{format_pct(self.lift_rel)} vs control (p = {format_p(self.p_value)})."
        )


@dataclass(frozen=True)
class Leader(SummaryOutcome):
    name: str
    rate: float
    lift_rel: Optional[float]
    p_value: float

    kind: ClassVar[str] = "leader"

    def render(self) -> str:
        return (
            f"Variant {self.name} is leading at {format_rate(self.rate)}% "
            f"({format_pct(self.lift_rel)} vs control), but results aren't yet "
            f"statistically reliable (p = {format_p(self.p_value)})."
        )


@dataclass(frozen=True)
class TieSignificant(SummaryOutcome):
    p_value: float
    multi: bool = False

    kind: ClassVar[str] = "tie_significant"

    def render(self) -> str:
        if self.multi:
            return (
                "Results show a tie with equal performance across variants "
                f"(chi-square, p = {format_p(self.p_value)}). "
                "All top variants perform identically."
            )
        return (
            f"Results show a tie with equal performance (p = {format_p(self.p_value)}). "
            "Both variants perform identically."
        )


@dataclass(frozen=True)
class TieNotSignificant(SummaryOutcome):
    p_value: float
    multi: bool = False

    kind: ClassVar[str] = "tie_not_significant"

    def render(self) -> str:
        test = "chi-square p" if self.multi else "p"
        return (
            f"No clear leader - variants are performing equally "
            f"({test} = {format_p(self.p_value)}). Continue collecting data."
        )


@dataclass(frozen=True)
class MultiVariantWinner(SummaryOutcome):
    name: str
    rate: float
    p_value: float

    kind: ClassVar[str] = "multi_variant_winner"

    def render(self) -> str:
        return (
            f"We found a real difference across variants (chi-square, p = {format_p(self.p_value)}). "
            f"{self.name} has the highest rate at {format_rate(self.rate)}%. "
            "No pairwise follow-ups were run."
        )


@dataclass(frozen=True)
class MultiVariantNoWinner(SummaryOutcome):
    leader: str
    rate: float
    p_value: float

    kind: ClassVar[str] = "multi_variant_no_winner"

    def render(self) -> str:
        return (
            f"No clear winner yet (chi-square p = {format_p(self.p_value)}). "
            f"{self.leader} is currently leading at {format_rate(self.rate)}%."
        )


def classify_outcome(
    significant: bool,
    p_value: float,
    winner: Optional["VariantResult"],
    leader: Optional["VariantResult"],
    multi: bool,
) -> SummaryOutcome:
    if significant:
        if winner is None:
            return TieSignificant(p_value=p_value, multi=multi)
        if multi:
            return MultiVariantWinner(name=winner.name, rate=winner.rate, p_value=p_value)
        return Winner(
            name=winner.name, rate=winner.rate, lift_rel=winner.lift_rel, p_value=p_value
        )

    if leader is None:
        return TieNotSignificant(p_value=p_value, multi=multi)
    if multi:
        return MultiVariantNoWinner(leader=leader.name, rate=leader.rate, p_value=p_value)
    return Leader(name=leader.name, rate=leader.rate, lift_rel=leader.lift_rel, p_value=p_value)
