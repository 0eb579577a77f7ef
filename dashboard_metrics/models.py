"""
Dashboard Data Model
====================

Dataclasses for the dashboard JSON document produced by the export pipeline.

All time-indexed series are parallel lists aligned by position with their
`dates`. Dense series hold floats; sparse series (step chart, benchmark and
their drawdowns) hold None on dates without a value.

from_dict() tolerates older exports that predate the step chart, the
benchmark drawdown, per-trade returns and the current position block.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .metrics import MonthlyReturns, NullableSeries, Series


def _float_list(values: Optional[List]) -> Series:
    return [float(v) for v in values or []]


def _nullable_float_list(values: Optional[List]) -> NullableSeries:
    return [None if v is None else float(v) for v in values or []]


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


@dataclass
class Metadata:
    """Descriptive strategy fields; only start_date changes on rebase."""
    strategy_name: Optional[str] = None
    asset: Optional[str] = None
    exchange: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    last_updated: Optional[str] = None
    starting_capital: Optional[float] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    # Key order of the source document; to_dict() writes back the same keys
    source_keys: Tuple[str, ...] = field(default=(), repr=False)

    _FIELDS = ('strategy_name', 'asset', 'exchange', 'start_date', 'end_date', 'last_updated')
    _KNOWN = _FIELDS + ('starting_capital',)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Metadata":
        raw = dict(raw or {})
        source_keys = tuple(raw)
        known = {}
        for key in cls._FIELDS:
            value = raw.pop(key, None)
            if value is not None:
                known[key] = str(value)
        return cls(
            starting_capital=_optional_float(raw.pop('starting_capital', None)),
            extra=raw,
            source_keys=source_keys,
            **known,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Source keys in source order, then any known field set since loading."""
        result = {}
        for key in self.source_keys:
            result[key] = getattr(self, key) if key in self._KNOWN else self.extra.get(key)
        for key in self._KNOWN:
            if key not in result and getattr(self, key) is not None:
                result[key] = getattr(self, key)
        for key, value in self.extra.items():
            result.setdefault(key, value)
        return result


@dataclass
class EquityCurve:
    dates: List[str] = field(default_factory=list)
    portfolio_value: Series = field(default_factory=list)
    btc_benchmark: NullableSeries = field(default_factory=list)
    step_chart: NullableSeries = field(default_factory=list)  # realised PnL only

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "EquityCurve":
        raw = raw or {}
        return cls(
            dates=[str(d) for d in raw.get('dates') or []],
            portfolio_value=_float_list(raw.get('portfolio_value')),
            btc_benchmark=_nullable_float_list(raw.get('btc_benchmark')),
            step_chart=_nullable_float_list(raw.get('step_chart')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dates': list(self.dates),
            'portfolio_value': list(self.portfolio_value),
            'btc_benchmark': list(self.btc_benchmark),
            'step_chart': list(self.step_chart),
        }


@dataclass
class Drawdown:
    dates: List[str] = field(default_factory=list)
    drawdown_pct: NullableSeries = field(default_factory=list)
    trade_only_drawdown_pct: NullableSeries = field(default_factory=list)
    btc_drawdown_pct: NullableSeries = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Drawdown":
        raw = raw or {}
        return cls(
            dates=[str(d) for d in raw.get('dates') or []],
            drawdown_pct=_nullable_float_list(raw.get('drawdown_pct')),
            trade_only_drawdown_pct=_nullable_float_list(raw.get('trade_only_drawdown_pct')),
            btc_drawdown_pct=_nullable_float_list(raw.get('btc_drawdown_pct')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dates': list(self.dates),
            'drawdown_pct': list(self.drawdown_pct),
            'trade_only_drawdown_pct': list(self.trade_only_drawdown_pct),
            'btc_drawdown_pct': list(self.btc_drawdown_pct),
        }


@dataclass
class RollingSharpe:
    dates: List[str] = field(default_factory=list)
    sharpe_90d: NullableSeries = field(default_factory=list)  # None during warm-up

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "RollingSharpe":
        raw = raw or {}
        return cls(
            dates=[str(d) for d in raw.get('dates') or []],
            sharpe_90d=_nullable_float_list(raw.get('sharpe_90d')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'dates': list(self.dates), 'sharpe_90d': list(self.sharpe_90d)}


@dataclass
class Statistics:
    """Summary figures. Percentages are None where undefined."""
    total_return_pct: Optional[float] = None
    annualized_return_pct: Optional[float] = None
    sharpe_ratio: Optional[float] = None
    sortino_ratio: Optional[float] = None
    max_drawdown_pct: Optional[float] = None
    max_realised_drawdown_pct: Optional[float] = None
    max_trade_drawdown_pct: Optional[float] = None  # worst trade
    best_trade_pct: Optional[float] = None
    num_trades: int = 0
    strategy_vs_btc_pct: Optional[float] = None
    best_month_pct: Optional[float] = None
    worst_month_pct: Optional[float] = None
    winning_months: int = 0
    losing_months: int = 0
    starting_capital: Optional[float] = None
    final_capital: Optional[float] = None

    _COUNTS = ('num_trades', 'winning_months', 'losing_months')

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Statistics":
        raw = raw or {}
        values = {}
        for name in cls.__dataclass_fields__:
            if name in cls._COUNTS:
                values[name] = int(raw.get(name) or 0)
            else:
                values[name] = _optional_float(raw.get(name))
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


@dataclass
class PerTradeReturn:
    """
    One closed or open trade.

    Trades carry no dates: cv_start/cv_exit (capital value before and after
    the trade) are the only link to the equity curve.
    """
    trade_id: int
    side: str
    status: str
    return_pct: float
    cv_start: float
    cv_exit: float

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PerTradeReturn":
        return cls(
            trade_id=int(raw['trade_id']),
            side=str(raw.get('side', '')),
            status=str(raw.get('status', '')),
            return_pct=float(raw['return_pct']),
            cv_start=float(raw['cv_start']),
            cv_exit=float(raw['cv_exit']),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trade_id': self.trade_id,
            'side': self.side,
            'status': self.status,
            'return_pct': self.return_pct,
            'cv_start': self.cv_start,
            'cv_exit': self.cv_exit,
        }


@dataclass
class CurrentPosition:
    """Open-position snapshot; describes "now" and is never rebased."""
    is_open: bool = False
    side: Optional[str] = None
    entry_capital: Optional[float] = None
    current_capital: Optional[float] = None
    unrealized_pnl_usdt: Optional[float] = None
    unrealized_pnl_pct: Optional[float] = None

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "CurrentPosition":
        if not raw:
            return cls()
        return cls(
            is_open=bool(raw.get('is_open', False)),
            side=raw.get('side'),
            entry_capital=_optional_float(raw.get('entry_capital')),
            current_capital=_optional_float(raw.get('current_capital')),
            unrealized_pnl_usdt=_optional_float(raw.get('unrealized_pnl_usdt')),
            unrealized_pnl_pct=_optional_float(raw.get('unrealized_pnl_pct')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_open': self.is_open,
            'side': self.side,
            'entry_capital': self.entry_capital,
            'current_capital': self.current_capital,
            'unrealized_pnl_usdt': self.unrealized_pnl_usdt,
            'unrealized_pnl_pct': self.unrealized_pnl_pct,
        }


@dataclass
class DashboardData:
    """Complete dashboard document. Treat instances as immutable."""
    metadata: Metadata
    equity_curve: EquityCurve
    drawdown: Drawdown
    monthly_returns: MonthlyReturns
    rolling_sharpe: RollingSharpe
    statistics: Statistics
    per_trade_returns: List[PerTradeReturn] = field(default_factory=list)
    current_position: CurrentPosition = field(default_factory=CurrentPosition)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "DashboardData":
        """Build from a parsed JSON document, applying defaults for missing sections."""
        monthly = {
            str(year): {
                str(month): _optional_float(value)
                for month, value in (months or {}).items()
            }
            for year, months in (raw.get('monthly_returns') or {}).items()
        }
        return cls(
            metadata=Metadata.from_dict(raw.get('metadata')),
            equity_curve=EquityCurve.from_dict(raw.get('equity_curve')),
            drawdown=Drawdown.from_dict(raw.get('drawdown')),
            monthly_returns=monthly,
            rolling_sharpe=RollingSharpe.from_dict(raw.get('rolling_sharpe')),
            statistics=Statistics.from_dict(raw.get('statistics')),
            per_trade_returns=[PerTradeReturn.from_dict(t) for t in raw.get('per_trade_returns') or []],
            current_position=CurrentPosition.from_dict(raw.get('current_position')),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization (same shape as the input)."""
        return {
            'metadata': self.metadata.to_dict(),
            'equity_curve': self.equity_curve.to_dict(),
            'drawdown': self.drawdown.to_dict(),
            'monthly_returns': {year: dict(months) for year, months in self.monthly_returns.items()},
            'rolling_sharpe': self.rolling_sharpe.to_dict(),
            'statistics': self.statistics.to_dict(),
            'per_trade_returns': [t.to_dict() for t in self.per_trade_returns],
            'current_position': self.current_position.to_dict(),
        }
