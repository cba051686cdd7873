import logging
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.config import settings
from app.db import dynamo
from app.routers.auth import get_current_user_id
from app.utils.analyzer import FuelAnalyzer

router = APIRouter()
logger = logging.getLogger(__name__)

fuel_analyzer = FuelAnalyzer(
    maintenance_intervals=settings.MAINTENANCE_INTERVALS,
    average_daily_miles=settings.AVERAGE_DAILY_MILES,
    price_spread_threshold=settings.PRICE_SPREAD_THRESHOLD,
    tz=settings.ANALYTICS_TIMEZONE,
)


def load_analytics_inputs(
    user_id: str,
    vehicle_id: Optional[str] = None,
) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]], Optional[Dict[str, Any]]]:
    """
    Fetch (fuel expenses, service records, vehicle) for one user.

    Without a vehicle_id the profile of the user's first vehicle by make is
    used, and fuel expenses and service records of every vehicle are included.
    With one, both collections are limited to that vehicle.
    """
    vehicles = dynamo.get_vehicles_for_user(user_id)
    if vehicle_id:
        vehicle = next((v for v in vehicles if v.get("vehicle_id") == vehicle_id), None)
        if vehicle is None:
            raise HTTPException(status_code=404, detail="Vehicle not found")
    else:
        vehicle = vehicles[0] if vehicles else None

    fuel_expenses = dynamo.get_fuel_expenses_for_user(user_id)
    if vehicle_id:
        fuel_expenses = [e for e in fuel_expenses if e.get("vehicle_id") == vehicle_id]

    service_records = dynamo.get_service_records_for_user(user_id, vehicle_id)
    return fuel_expenses, service_records, vehicle


@router.get("/")
def get_analytics(
    vehicle_id: Optional[str] = None,
    as_of: Optional[date] = Query(None, description="Compute the report as of this date (default: now)"),
    user_id: str = Depends(get_current_user_id),
) -> Dict:
    """
    Recompute the analytics report for the current user.
    """
    try:
        fuel_expenses, service_records, vehicle = load_analytics_inputs(user_id, vehicle_id)
        logger.info(
            f"Computing analytics for user {user_id}: "
            f"{len(fuel_expenses)} fuel expenses, {len(service_records)} service records"
        )

        now = datetime.combine(as_of, time.min) if as_of else None
        report = fuel_analyzer.refresh(fuel_expenses, service_records, vehicle, now=now)

        user = dynamo.get_user_by_id(user_id) or {}
        return {
            "user": {"name": user.get("full_name") or "User"},
            "report": report.to_dict(),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error computing analytics: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
