from __future__ import annotations

import calendar
import logging
import math
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import date as date_type, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar
from zoneinfo import ZoneInfo

from app.utils.formatting import format_number

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]
T = TypeVar("T")

# Average CO2 emitted per gallon of gasoline, in kg.
CO2_KG_PER_GALLON = 8.887
TREES_PER_TONNE_CO2 = 0.5
CARBON_OFFSET_PRICE_PER_TONNE = 20.0

RAIN_MPG_FACTOR = 0.9
COLD_MPG_FACTOR = 0.85
RATED_MPG_TOLERANCE = 0.9

PREDICTION_CONFIDENCE = 0.8
DEFAULT_MAINTENANCE_INTERVALS: Dict[str, float] = {"Oil Change": 5000}
MAINTENANCE_CATEGORY_DELIMITER = " - "

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
SECONDS_PER_DAY = 24 * 60 * 60


def to_number(value: Any) -> float:
    """Coerce a stored numeric field to float. Missing, malformed and non-finite values become 0."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_timestamp(value: Any, tz: tzinfo = timezone.utc) -> Optional[datetime]:
    """
    Parse a stored timestamp into a naive wall-clock datetime.

    Aware timestamps are converted to ``tz`` first; naive ones are taken as
    already local. Returns None for anything that is not a date.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date_type):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz).replace(tzinfo=None)
    return parsed


def _sort_key(when: Optional[datetime]) -> Tuple[bool, datetime]:
    # Undated records sort first.
    return (when is not None, when or datetime.min)


def _days_between(start: Optional[datetime], end: Optional[datetime]) -> float:
    if start is None or end is None:
        return 0.0
    return (end - start).total_seconds() / SECONDS_PER_DAY


def _same_month(when: Optional[datetime], year: int, month: int) -> bool:
    return when is not None and when.year == year and when.month == month


def _label(when: Optional[datetime]) -> str:
    return when.date().isoformat() if when else ""


@dataclass(frozen=True)
class _Fill:
    when: Optional[datetime]
    location: str
    mileage: float
    gallons: float
    price: float
    total: float


@dataclass(frozen=True)
class _Service:
    when: Optional[datetime]
    service_type: str
    mileage: float
    cost: float
    description: str


# --- Report sections ---

@dataclass(frozen=True)
class TrendPoint:
    date: str
    value: float


@dataclass(frozen=True)
class ServiceHistoryItem:
    date: str
    type: str
    mileage: float


@dataclass(frozen=True)
class VehicleStats:
    make: str = ""
    model: str = ""
    current_mileage: float = 0.0


@dataclass(frozen=True)
class MonthlyComparison:
    current: float = 0.0
    previous: float = 0.0
    change: float = 0.0


@dataclass(frozen=True)
class CostBreakdownItem:
    category: str
    amount: float
    percentage: float


@dataclass(frozen=True)
class MaintenancePrediction:
    type: str
    predicted_date: str
    predicted_mileage: float
    confidence: float


@dataclass(frozen=True)
class EnvironmentalImpact:
    co2_emissions: float = 0.0
    trees_needed: float = 0.0
    carbon_offset_cost: float = 0.0


@dataclass(frozen=True)
class CategoryAmount:
    category: str
    amount: float


@dataclass(frozen=True)
class MaintenanceCosts:
    total: float = 0.0
    monthly: float = 0.0
    yearly: float = 0.0
    by_category: List[CategoryAmount] = field(default_factory=list)


@dataclass(frozen=True)
class CostSavings:
    potential: float = 0.0
    recommendations: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class DrivingBehavior:
    average_daily_mileage: float = 0.0
    average_days_between_refuels: float = 0.0
    weekday_vs_weekend: Dict[str, float] = field(
        default_factory=lambda: {"weekday": 0.0, "weekend": 0.0}
    )
    refueling_patterns: Dict[str, int] = field(
        default_factory=lambda: {"morning": 0, "afternoon": 0, "evening": 0, "night": 0}
    )


@dataclass(frozen=True)
class StationPrice:
    name: str
    average_price: float
    visits: int


@dataclass(frozen=True)
class CostOptimization:
    best_gas_stations: List[StationPrice] = field(default_factory=list)
    price_trends: Dict[str, float] = field(default_factory=lambda: dict.fromkeys(WEEKDAYS, 0.0))
    cost_per_mile: float = 0.0
    optimal_refueling_time: str = ""


@dataclass(frozen=True)
class EnvironmentalScore:
    eco_driving_score: float = 0.0
    weather_impact: Dict[str, float] = field(
        default_factory=lambda: {"sunny": 0.0, "rainy": 0.0, "cold": 0.0}
    )
    savings_potential: Dict[str, float] = field(
        default_factory=lambda: {"monthly": 0.0, "yearly": 0.0}
    )


@dataclass(frozen=True)
class AnalyticsReport:
    """Read-only snapshot produced by a single analytics computation."""

    generated_at: str
    monthly_expenses: float
    yearly_expenses: float
    total_gallons: float
    average_fuel_price: float
    avg_mpg: float
    best_mpg: float
    worst_mpg: float
    next_service: str
    service_mileage: float
    vehicle_stats: VehicleStats
    fuel_trends: List[TrendPoint]
    cost_trends: List[TrendPoint]
    fuel_efficiency_trend: List[TrendPoint]
    service_history: List[ServiceHistoryItem]
    monthly_comparison: MonthlyComparison
    cost_breakdown: List[CostBreakdownItem]
    maintenance_predictions: List[MaintenancePrediction]
    environmental_impact: EnvironmentalImpact
    maintenance_costs: MaintenanceCosts
    cost_savings: CostSavings
    driving_behavior: DrivingBehavior
    cost_optimization: CostOptimization
    environmental_score: EnvironmentalScore

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class FuelAnalyzer:
    """
    Stateless analytics over a user's fuel expenses, service records and
    vehicle profile.

    Every date-windowed computation takes ``now`` explicitly; the only method
    that reads the clock is :meth:`refresh`. Inputs are plain mappings as
    returned by the record store and are never mutated.
    """

    def __init__(
        self,
        maintenance_intervals: Optional[Mapping[str, float]] = None,
        average_daily_miles: float = 30.0,
        price_spread_threshold: float = 0.5,
        tz: str | tzinfo = "UTC",
    ) -> None:
        if average_daily_miles <= 0:
            raise ValueError("average_daily_miles must be positive")
        self._maintenance_intervals = dict(
            DEFAULT_MAINTENANCE_INTERVALS if maintenance_intervals is None else maintenance_intervals
        )
        self._average_daily_miles = average_daily_miles
        self._price_spread_threshold = price_spread_threshold
        if isinstance(tz, str):
            tz = timezone.utc if tz.upper() == "UTC" else ZoneInfo(tz)
        self._tz = tz

    @property
    def tz(self) -> tzinfo:
        return self._tz

    # --- Normalisation ---

    def _local(self, now: datetime) -> datetime:
        if now.tzinfo is None:
            return now
        return now.astimezone(self._tz).replace(tzinfo=None)

    def _fills(self, fuel_records: Optional[Iterable[Record]]) -> List[_Fill]:
        fills = [
            _Fill(
                when=parse_timestamp(record.get("date"), self._tz),
                location=str(record.get("location") or record.get("station") or "Unknown"),
                mileage=to_number(record.get("mileage")),
                gallons=to_number(record.get("gallons")),
                price=to_number(record.get("price_per_unit")),
                total=to_number(record.get("total")),
            )
            for record in fuel_records or []
            if isinstance(record, Mapping)
        ]
        fills.sort(key=lambda fill: _sort_key(fill.when))
        return fills

    def _services(self, service_records: Optional[Iterable[Record]]) -> List[_Service]:
        services = [
            _Service(
                when=parse_timestamp(record.get("date"), self._tz),
                service_type=str(record.get("service_type") or ""),
                mileage=to_number(record.get("mileage")),
                cost=to_number(record.get("cost")),
                description=str(record.get("description") or ""),
            )
            for record in service_records or []
            if isinstance(record, Mapping)
        ]
        services.sort(key=lambda service: _sort_key(service.when))
        return services

    @staticmethod
    def _transitions(fills: List[_Fill]) -> Iterable[Tuple[_Fill, float]]:
        """Yield (fill, miles driven since the previous fill) for every fill with gallons > 0."""
        for previous, current in zip(fills, fills[1:]):
            if current.gallons > 0:
                yield current, current.mileage - previous.mileage

    @staticmethod
    def _rated_mpg(vehicle: Record) -> float:
        return to_number(vehicle.get("rated_mpg", vehicle.get("mpg")))

    def _weighted_mpg(self, fills: List[_Fill]) -> float:
        total_miles = 0.0
        total_gallons = 0.0
        for fill, miles in self._transitions(fills):
            total_miles += miles
            total_gallons += fill.gallons
        return total_miles / total_gallons if total_gallons > 0 else 0.0

    # --- Spend ---

    def monthly_total(self, fuel_records: Iterable[Record], now: datetime) -> float:
        now = self._local(now)
        return self._month_total(self._fills(fuel_records), now.year, now.month)

    @staticmethod
    def _month_total(fills: List[_Fill], year: int, month: int) -> float:
        return round(sum(f.total for f in fills if _same_month(f.when, year, month)), 2)

    def yearly_total(self, fuel_records: Iterable[Record], now: datetime) -> float:
        now = self._local(now)
        fills = self._fills(fuel_records)
        return round(sum(f.total for f in fills if f.when is not None and f.when.year == now.year), 2)

    def total_gallons(self, fuel_records: Iterable[Record]) -> float:
        return sum(fill.gallons for fill in self._fills(fuel_records))

    def average_fuel_price(self, fuel_records: Iterable[Record]) -> float:
        fills = self._fills(fuel_records)
        gallons = sum(f.gallons for f in fills)
        return sum(f.total for f in fills) / gallons if gallons > 0 else 0.0

    def monthly_comparison(self, fuel_records: Iterable[Record], now: datetime) -> MonthlyComparison:
        now = self._local(now)
        fills = self._fills(fuel_records)
        if now.month == 1:
            previous_year, previous_month = now.year - 1, 12
        else:
            previous_year, previous_month = now.year, now.month - 1

        current = self._month_total(fills, now.year, now.month)
        previous = self._month_total(fills, previous_year, previous_month)
        change = (current - previous) / previous * 100 if previous > 0 else 0.0
        return MonthlyComparison(current=current, previous=previous, change=change)

    def cost_breakdown(self, fuel_records: Iterable[Record]) -> List[CostBreakdownItem]:
        """
        Group spend by calendar month name.

        Months with the same name in different years share one bucket.
        """
        fills = self._fills(fuel_records)
        grand_total = sum(f.total for f in fills)
        by_month: Dict[str, float] = defaultdict(float)
        for fill in fills:
            month = calendar.month_name[fill.when.month] if fill.when else "Unknown"
            by_month[month] += fill.total

        return [
            CostBreakdownItem(
                category=month,
                amount=amount,
                percentage=amount / grand_total * 100 if grand_total > 0 else 0.0,
            )
            for month, amount in by_month.items()
        ]

    # --- Efficiency ---

    def average_mpg(self, fuel_records: Iterable[Record]) -> float:
        """
        Total miles over total gallons across consecutive fill-ups.

        This is weighted by gallons, not a mean of per-fill MPG values.
        Decreasing odometer readings are not corrected and lower the result.
        """
        fills = self._fills(fuel_records)
        if len(fills) < 2:
            return 0.0
        return self._weighted_mpg(fills)

    def mpg_extremes(self, fuel_records: Iterable[Record]) -> Tuple[float, float]:
        """Return (best, worst) per-fill MPG, or (0, 0) when no fill-up pair is usable."""
        best: Optional[float] = None
        worst: Optional[float] = None
        for fill, miles in self._transitions(self._fills(fuel_records)):
            mpg = miles / fill.gallons
            best = mpg if best is None else max(best, mpg)
            worst = mpg if worst is None else min(worst, mpg)
        return (0.0 if best is None else best, 0.0 if worst is None else worst)

    def fuel_trends(self, fuel_records: Iterable[Record]) -> List[TrendPoint]:
        return [TrendPoint(date=_label(f.when), value=f.gallons) for f in self._fills(fuel_records)]

    def cost_trends(self, fuel_records: Iterable[Record]) -> List[TrendPoint]:
        return [TrendPoint(date=_label(f.when), value=f.total) for f in self._fills(fuel_records)]

    def fuel_efficiency_trend(self, fuel_records: Iterable[Record]) -> List[TrendPoint]:
        return [
            TrendPoint(date=_label(fill.when), value=miles / fill.gallons)
            for fill, miles in self._transitions(self._fills(fuel_records))
        ]

    # --- Service ---

    def service_history(self, service_records: Iterable[Record]) -> List[ServiceHistoryItem]:
        return [
            ServiceHistoryItem(date=_label(s.when), type=s.service_type, mileage=s.mileage)
            for s in self._services(service_records)
        ]

    @staticmethod
    def next_service(vehicle: Optional[Record]) -> str:
        if not vehicle:
            return "No vehicle data"
        miles = to_number(vehicle.get("next_service_mileage")) - to_number(vehicle.get("current_mileage"))
        if miles <= 0:
            return "Service Due Now"
        return f"{format_number(miles)} miles until next service"

    def maintenance_predictions(
        self,
        service_records: Iterable[Record],
        vehicle: Optional[Record],
        now: datetime,
    ) -> List[MaintenancePrediction]:
        """
        Project the next service of each tracked type from its most recent record.

        Types that have never been serviced are left out.
        """
        if not vehicle:
            return []

        now = self._local(now)
        services = self._services(service_records)
        current_mileage = to_number(vehicle.get("current_mileage"))

        predictions = []
        for service_type, interval in self._maintenance_intervals.items():
            matching = [s for s in services if s.service_type == service_type]
            if not matching:
                continue
            # Stable sort: the latest entry among equal dates wins.
            last = matching[-1]
            miles_remaining = interval - (current_mileage - last.mileage)
            days_remaining = miles_remaining / self._average_daily_miles
            predictions.append(
                MaintenancePrediction(
                    type=service_type,
                    predicted_date=(now + timedelta(days=days_remaining)).date().isoformat(),
                    predicted_mileage=current_mileage + miles_remaining,
                    confidence=PREDICTION_CONFIDENCE,
                )
            )
        return predictions

    def maintenance_costs(self, service_records: Iterable[Record], now: datetime) -> MaintenanceCosts:
        """
        Roll up service costs by period and by category.

        The category is the part of the description before the first " - ",
        e.g. "Brakes - front pads" counts as "Brakes". Free-text descriptions
        make this a loose grouping, not a fixed taxonomy.
        """
        now = self._local(now)
        services = self._services(service_records)

        by_category: Dict[str, float] = defaultdict(float)
        for service in services:
            category = service.description.split(MAINTENANCE_CATEGORY_DELIMITER)[0] or "Other"
            by_category[category] += service.cost

        return MaintenanceCosts(
            total=round(sum(s.cost for s in services), 2),
            monthly=round(sum(s.cost for s in services if _same_month(s.when, now.year, now.month)), 2),
            yearly=round(sum(s.cost for s in services if s.when is not None and s.when.year == now.year), 2),
            by_category=[CategoryAmount(category=c, amount=round(a, 2)) for c, a in by_category.items()],
        )

    # --- Impact and savings ---

    def environmental_impact(self, fuel_records: Iterable[Record]) -> EnvironmentalImpact:
        co2_emissions = self.total_gallons(fuel_records) * CO2_KG_PER_GALLON
        tonnes = co2_emissions / 1000
        return EnvironmentalImpact(
            co2_emissions=co2_emissions,
            trees_needed=tonnes * TREES_PER_TONNE_CO2,
            carbon_offset_cost=tonnes * CARBON_OFFSET_PRICE_PER_TONNE,
        )

    def cost_savings(self, fuel_records: Iterable[Record], vehicle: Optional[Record]) -> CostSavings:
        fills = self._fills(fuel_records)
        if not vehicle or len(fills) < 2:
            return CostSavings()

        recommendations: List[str] = []
        potential = 0.0
        prices = [f.price for f in fills]
        average_price = sum(prices) / len(prices)
        spread = max(prices) - min(prices)
        total_gallons = sum(f.gallons for f in fills)

        if spread > self._price_spread_threshold:
            recommendations.append(
                f"You could save up to ${spread:.2f} per gallon by shopping around for better prices."
            )
            potential += spread * total_gallons

        mpg = self._weighted_mpg(fills)
        rated_mpg = self._rated_mpg(vehicle)
        if mpg < rated_mpg * RATED_MPG_TOLERANCE:
            recommendations.append(
                "Improving your driving habits could help you achieve "
                f"the vehicle's rated MPG of {format_number(rated_mpg)}."
            )
            potential += (rated_mpg - mpg) * average_price * total_gallons

        return CostSavings(potential=potential, recommendations=recommendations)

    def environmental_score(self, fuel_records: Iterable[Record], vehicle: Optional[Record]) -> EnvironmentalScore:
        fills = self._fills(fuel_records)
        if not fills or not vehicle:
            return EnvironmentalScore()

        actual_mpg = self._weighted_mpg(fills)
        rated_mpg = self._rated_mpg(vehicle)
        eco_score = min(100.0, actual_mpg / rated_mpg * 100) if rated_mpg else 0.0

        average_gallons = sum(f.gallons for f in fills) / len(fills)
        monthly_savings = (rated_mpg - actual_mpg) * average_gallons * fills[-1].price

        return EnvironmentalScore(
            eco_driving_score=eco_score,
            weather_impact={
                "sunny": actual_mpg,
                "rainy": actual_mpg * RAIN_MPG_FACTOR,
                "cold": actual_mpg * COLD_MPG_FACTOR,
            },
            savings_potential={"monthly": monthly_savings, "yearly": monthly_savings * 12},
        )

    # --- Habits ---

    def driving_behavior(self, fuel_records: Iterable[Record]) -> DrivingBehavior:
        fills = self._fills(fuel_records)
        if not fills:
            return DrivingBehavior()

        first, last = fills[0], fills[-1]
        elapsed_days = _days_between(first.when, last.when)
        total_miles = last.mileage - first.mileage
        average_daily = total_miles / elapsed_days if elapsed_days else 0.0

        gaps = [
            days
            for days in (_days_between(a.when, b.when) for a, b in zip(fills, fills[1:]))
            if days > 0
        ]
        average_gap = sum(gaps) / len(gaps) if gaps else 0.0

        split = {"weekday": 0.0, "weekend": 0.0}
        patterns = {"morning": 0, "afternoon": 0, "evening": 0, "night": 0}
        for index, fill in enumerate(fills):
            if fill.when is None:
                continue
            miles = fill.mileage - fills[index - 1].mileage if index else 0.0
            split["weekend" if fill.when.weekday() >= 5 else "weekday"] += miles

            hour = fill.when.hour
            if 5 <= hour < 12:
                patterns["morning"] += 1
            elif 12 <= hour < 17:
                patterns["afternoon"] += 1
            elif 17 <= hour < 22:
                patterns["evening"] += 1
            else:
                patterns["night"] += 1

        return DrivingBehavior(
            average_daily_mileage=average_daily,
            average_days_between_refuels=average_gap,
            weekday_vs_weekend=split,
            refueling_patterns=patterns,
        )

    def cost_optimization(self, fuel_records: Iterable[Record]) -> CostOptimization:
        fills = self._fills(fuel_records)
        if not fills:
            return CostOptimization()

        stations: Dict[str, List[float]] = defaultdict(list)
        by_weekday: Dict[str, List[float]] = defaultdict(list)
        for fill in fills:
            stations[fill.location].append(fill.price)
            if fill.when is not None:
                by_weekday[WEEKDAYS[fill.when.weekday()]].append(fill.price)

        ranked = sorted(
            (
                StationPrice(name=name, average_price=sum(prices) / len(prices), visits=len(prices))
                for name, prices in stations.items()
            ),
            key=lambda station: station.average_price,
        )

        weekday_means = {day: sum(prices) / len(prices) for day, prices in by_weekday.items()}
        optimal = min(weekday_means, key=weekday_means.get) if weekday_means else ""

        mileage_span = fills[-1].mileage - fills[0].mileage
        total_cost = sum(f.total for f in fills)

        return CostOptimization(
            best_gas_stations=ranked[:3],
            price_trends={day: weekday_means.get(day, 0.0) for day in WEEKDAYS},
            cost_per_mile=total_cost / mileage_span if mileage_span else 0.0,
            optimal_refueling_time=optimal,
        )

    # --- Composition ---

    @staticmethod
    def _guarded(name: str, compute: Callable[[], T], fallback: Callable[[], T]) -> T:
        try:
            return compute()
        except (ArithmeticError, TypeError, ValueError):
            logger.exception("Analytics step %s failed, reporting an empty value", name)
            return fallback()

    def compute_analytics(
        self,
        fuel_records: Optional[Iterable[Record]],
        service_records: Optional[Iterable[Record]],
        vehicle: Optional[Record],
        now: datetime,
    ) -> AnalyticsReport:
        """
        Build the full analytics report.

        Each section is computed independently; a failure in one section is
        logged and yields that section's empty value without affecting the rest.
        """
        fuel = [r for r in fuel_records or [] if isinstance(r, Mapping)]
        services = [r for r in service_records or [] if isinstance(r, Mapping)]
        vehicle = vehicle if isinstance(vehicle, Mapping) and vehicle else None
        logger.debug("Computing analytics for %d fuel and %d service records", len(fuel), len(services))

        g = self._guarded
        best_mpg, worst_mpg = g("mpg_extremes", lambda: self.mpg_extremes(fuel), lambda: (0.0, 0.0))

        return AnalyticsReport(
            generated_at=now.isoformat(),
            monthly_expenses=g("monthly_total", lambda: self.monthly_total(fuel, now), float),
            yearly_expenses=g("yearly_total", lambda: self.yearly_total(fuel, now), float),
            total_gallons=g("total_gallons", lambda: self.total_gallons(fuel), float),
            average_fuel_price=g("average_fuel_price", lambda: self.average_fuel_price(fuel), float),
            avg_mpg=g("average_mpg", lambda: self.average_mpg(fuel), float),
            best_mpg=best_mpg,
            worst_mpg=worst_mpg,
            next_service=g("next_service", lambda: self.next_service(vehicle), lambda: "No vehicle data"),
            service_mileage=to_number(vehicle.get("next_service_mileage")) if vehicle else 0.0,
            vehicle_stats=VehicleStats(
                make=str(vehicle.get("make") or ""),
                model=str(vehicle.get("model") or ""),
                current_mileage=to_number(vehicle.get("current_mileage")),
            ) if vehicle else VehicleStats(),
            fuel_trends=g("fuel_trends", lambda: self.fuel_trends(fuel), list),
            cost_trends=g("cost_trends", lambda: self.cost_trends(fuel), list),
            fuel_efficiency_trend=g("fuel_efficiency_trend", lambda: self.fuel_efficiency_trend(fuel), list),
            service_history=g("service_history", lambda: self.service_history(services), list),
            monthly_comparison=g(
                "monthly_comparison", lambda: self.monthly_comparison(fuel, now), MonthlyComparison
            ),
            cost_breakdown=g("cost_breakdown", lambda: self.cost_breakdown(fuel), list),
            maintenance_predictions=g(
                "maintenance_predictions",
                lambda: self.maintenance_predictions(services, vehicle, now),
                list,
            ),
            environmental_impact=g(
                "environmental_impact", lambda: self.environmental_impact(fuel), EnvironmentalImpact
            ),
            maintenance_costs=g(
                "maintenance_costs", lambda: self.maintenance_costs(services, now), MaintenanceCosts
            ),
            cost_savings=g("cost_savings", lambda: self.cost_savings(fuel, vehicle), CostSavings),
            driving_behavior=g("driving_behavior", lambda: self.driving_behavior(fuel), DrivingBehavior),
            cost_optimization=g("cost_optimization", lambda: self.cost_optimization(fuel), CostOptimization),
            environmental_score=g(
                "environmental_score", lambda: self.environmental_score(fuel, vehicle), EnvironmentalScore
            ),
        )

    def refresh(
        self,
        fuel_records: Optional[Iterable[Record]],
        service_records: Optional[Iterable[Record]],
        vehicle: Optional[Record],
        now: Optional[datetime] = None,
    ) -> AnalyticsReport:
        """Recompute the report from scratch. Reads the clock once when ``now`` is omitted."""
        if now is None:
            now = datetime.now(self._tz)
        return self.compute_analytics(fuel_records, service_records, vehicle, now)


def compute_analytics(
    fuel_records: Optional[Iterable[Record]],
    service_records: Optional[Iterable[Record]],
    vehicle: Optional[Record],
    now: datetime,
    analyzer: Optional[FuelAnalyzer] = None,
) -> AnalyticsReport:
    return (analyzer or FuelAnalyzer()).compute_analytics(fuel_records, service_records, vehicle, now)
