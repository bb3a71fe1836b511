import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from candle_sync.scheduler.domain.signal_record import Direction, ScoreResult
from candle_sync.scheduler.domain.window_descriptor import WindowDescriptor
from candle_sync.scheduler.interfaces.scoring_adapter import ScoringAdapter


@dataclass(frozen=True)
class ConfluenceStrategy:
    id: str
    name: str
    triggers: Tuple[str, ...]
    filters: Tuple[str, ...]


DEFAULT_STRATEGIES: Tuple[ConfluenceStrategy, ...] = (
    ConfluenceStrategy(
        id="trend-following-ema",
        name="EMA trend + ADX",
        triggers=("EMA50 above/below EMA200", "ADX > 25", "MACD crossing with trend", "RSI side of 50"),
        filters=("Bollinger expansion", "ATR in range", "Stochastic aligned", "Volume > 120% avg"),
    ),
    ConfluenceStrategy(
        id="fibonacci-confluence",
        name="Fibonacci zone confluence",
        triggers=("Price at 61.8/78.6/100%", "14-bar high/low at level", "Pivot coincides", "Reversal candle"),
        filters=("Volume fading on approach", "RSI + Bollinger extreme", "Zone tested 2-3x", "No MACD divergence"),
    ),
    ConfluenceStrategy(
        id="price-action-pure",
        name="Pure price action",
        triggers=("Clear swing highs/lows", "Impulse body > 70%", "Pullback to 38.2-50%", "Continuation candle"),
        filters=("Structure preserved", "Impulse volume > pullback volume", "ADX > 25", "ROC rising"),
    ),
    ConfluenceStrategy(
        id="supply-demand-zones",
        name="Supply/demand zones",
        triggers=("Impulse + base + breakout", "Return to zone with rejection", "Volume 300%+", "Order block"),
        filters=("Fresh zone (< 3 tests)", "Rejection body > 70%", "Aligned with higher trend", "Visible imbalance"),
    ),
    ConfluenceStrategy(
        id="momentum-breakout",
        name="Momentum breakout",
        triggers=("S/R break on 200%+ volume", "MACD signal cross", "RSI through 50", "Strong body candle"),
        filters=("S/R held 3+ bars", "Rising volume", "ADX > 20 and rising", "Bollinger expanding"),
    ),
    ConfluenceStrategy(
        id="divergence-reversal",
        name="Divergence reversal",
        triggers=("Price vs RSI divergence", "Price vs MACD divergence", "At key S/R", "Strong reversal candle"),
        filters=("Divergence on 2+ indicators", "Zone tested before", "CCI extreme", "Williams %R critical"),
    ),
)

# (name, probability, bonus)
_CONFLUENCE_BONUSES = (
    ("EMA alignment", 0.5, 5),
    ("ADX strength", 0.6, 4),
    ("MACD confirmation", 0.5, 3),
    ("Volume above average", 0.4, 3),
    ("Fibonacci level", 0.7, 5),
)
_FIBONACCI_LEVELS = ("61.8%", "78.6%", "100%", "161.8%")


class RandomConfluenceScorer(ScoringAdapter):
    """
    Stand-in scoring pipeline: uniform draws dressed as indicator
    confluence. Carries no market meaning.
    """

    BASE_CONFIDENCE = 70
    MAX_CONFIDENCE = 95

    def __init__(
        self,
        strategies: Iterable[ConfluenceStrategy] = DEFAULT_STRATEGIES,
        enabled_strategy_ids: Optional[Iterable[str]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.strategies: List[ConfluenceStrategy] = list(strategies)
        if not self.strategies:
            raise ValueError("RandomConfluenceScorer needs at least one strategy")
        self.enabled_strategy_ids = (
            set(enabled_strategy_ids)
            if enabled_strategy_ids is not None
            else {s.id for s in self.strategies}
        )
        self.rng = rng or random.Random()

    def score(self, instrument: str, window: WindowDescriptor) -> ScoreResult:
        enabled = [s for s in self.strategies if s.id in self.enabled_strategy_ids]
        if not enabled:
            return ScoreResult(
                accepted=False,
                confidence=0.0,
                direction=Direction.CALL,
                details={"reasoning": "No strategy enabled"},
            )
        strategy = self.rng.choice(enabled)
        confirmations = [
            name for name, probability, _ in _CONFLUENCE_BONUSES if self.rng.random() < probability
        ]
        bonus = sum(b for name, _, b in _CONFLUENCE_BONUSES if name in confirmations)
        confidence = min(self.MAX_CONFIDENCE, self.BASE_CONFIDENCE + bonus)
        direction = Direction.CALL if self.rng.random() > 0.5 else Direction.PUT

        return ScoreResult(
            accepted=True,
            confidence=float(confidence),
            direction=direction,
            details={
                "strategy_id": strategy.id,
                "strategy": strategy.name,
                "triggers": list(strategy.triggers),
                "filters": list(strategy.filters),
                "confirmations": confirmations,
                "fibonacci_level": self.rng.choice(_FIBONACCI_LEVELS),
                "reasoning": ", ".join(confirmations) or "No confluence",
                "window_width": window.width.value,
            },
        )
