import calendar
import logging
import re
import uuid
from datetime import datetime
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException

from app.db import dynamo
from app.routers.analytics import fuel_analyzer, load_analytics_inputs
from app.routers.auth import get_current_user_id
from app.routers.fuel_expenses import MONTH_PATTERN
from app.utils import pdf_report

router = APIRouter()
logger = logging.getLogger(__name__)


def end_of_month(month: str) -> datetime:
    """'2025-11' -> 2025-11-30 23:59:59. Raises ValueError for a malformed month."""
    if not re.match(MONTH_PATTERN, month):
        raise ValueError(f"Invalid month: {month}")
    start = datetime.strptime(month, "%Y-%m")
    last_day = calendar.monthrange(start.year, start.month)[1]
    return start.replace(day=last_day, hour=23, minute=59, second=59)


@router.get("/monthly/{month}")
def generate_monthly_report(month: str, user_id: str = Depends(get_current_user_id)) -> Dict:
    """
    Generate the analytics report as of the end of the given month (e.g. '2025-11'),
    upload a PDF summary and a CSV of that month's fuel expenses to S3, and
    return the headline figures with download links.
    """
    try:
        as_of = end_of_month(month)
    except ValueError:
        raise HTTPException(status_code=400, detail="Month must be in YYYY-MM format")

    try:
        logger.info(f"Generating monthly report for user_id: {user_id}, month: {month}")

        month_expenses = dynamo.get_fuel_expenses_for_user(user_id, month)
        if not month_expenses:
            raise HTTPException(status_code=404, detail="No fuel expenses found for this month.")

        fuel_expenses, service_records, vehicle = load_analytics_inputs(user_id)
        report = fuel_analyzer.compute_analytics(fuel_expenses, service_records, vehicle, as_of)
        logger.info(f"Report computed: monthly total={report.monthly_expenses}")

        report_id = f"{user_id}_{month}_{uuid.uuid4().hex[:6]}"

        try:
            pdf_url = pdf_report.generate_and_upload_pdf(user_id, month, report, report_id)
        except Exception as e:
            logger.error(f"Error generating PDF: {str(e)}", exc_info=True)
            pdf_url = None

        try:
            csv_url = pdf_report.generate_and_upload_csv(user_id, month_expenses, report_id)
        except Exception as e:
            logger.error(f"Error generating CSV: {str(e)}", exc_info=True)
            csv_url = None

        return {
            "month": month,
            "total_spent": report.monthly_expenses,
            "change_vs_last_month": report.monthly_comparison.change,
            "total_gallons": sum(float(e.get("gallons") or 0) for e in month_expenses),
            "average_mpg": report.avg_mpg,
            "recommendations": report.cost_savings.recommendations,
            "pdf_report_url": pdf_url,
            "csv_report_url": csv_url,
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error generating report: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
