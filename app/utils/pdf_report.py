import csv
import io
import logging
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from app.core.config import settings
from app.utils.analyzer import AnalyticsReport
from app.utils.formatting import format_currency, format_number, format_percentage

logger = logging.getLogger(__name__)

# Initialize S3 client using default AWS credential chain
# (environment variables, AWS credentials file, or IAM role)
s3 = boto3.client("s3", region_name=settings.S3_REGION)

CSV_FIELDS = ["date", "location", "mileage", "gallons", "price_per_unit", "total", "payment_type"]


def _line(pdf: FPDF, text: str) -> None:
    pdf.cell(0, 8, text, new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def _heading(pdf: FPDF, text: str) -> None:
    pdf.ln(4)
    pdf.set_font("Helvetica", "B", 12)
    _line(pdf, text)
    pdf.set_font("Helvetica", "", 11)


def render_pdf(month: str, report: AnalyticsReport) -> bytes:
    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", "B", 16)
    _line(pdf, f"Fuel Report - {month}")

    pdf.set_font("Helvetica", "", 11)
    stats = report.vehicle_stats
    if stats.make or stats.model:
        _line(pdf, f"Vehicle: {stats.make} {stats.model} ({format_number(stats.current_mileage)} miles)")

    _heading(pdf, "Spending")
    comparison = report.monthly_comparison
    _line(pdf, f"This month: {format_currency(comparison.current)}")
    _line(pdf, f"Last month: {format_currency(comparison.previous)}")
    _line(pdf, f"Change: {format_percentage(comparison.change / 100)}")
    _line(pdf, f"Year to date: {format_currency(report.yearly_expenses)}")
    _line(pdf, f"Average price per gallon: {format_currency(report.average_fuel_price)}")

    _heading(pdf, "Efficiency")
    _line(pdf, f"Average MPG: {format_number(report.avg_mpg)}")
    _line(pdf, f"Best / worst MPG: {format_number(report.best_mpg)} / {format_number(report.worst_mpg)}")
    _line(pdf, f"Cost per mile: {format_currency(report.cost_optimization.cost_per_mile)}")

    _heading(pdf, "Maintenance")
    _line(pdf, report.next_service)
    for prediction in report.maintenance_predictions:
        _line(
            pdf,
            f"- {prediction.type}: around {prediction.predicted_date} "
            f"at {format_number(prediction.predicted_mileage)} miles",
        )
    _line(pdf, f"Maintenance spend this year: {format_currency(report.maintenance_costs.yearly)}")

    _heading(pdf, "Recommendations")
    if report.cost_savings.recommendations:
        for recommendation in report.cost_savings.recommendations:
            pdf.multi_cell(0, 8, f"- {recommendation}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        _line(pdf, f"Potential savings: {format_currency(report.cost_savings.potential)}")
    else:
        _line(pdf, "None")

    _heading(pdf, "Environmental impact")
    impact = report.environmental_impact
    _line(pdf, f"CO2 emitted: {format_number(impact.co2_emissions)} kg")
    _line(pdf, f"Offset cost: {format_currency(impact.carbon_offset_cost)}")

    return bytes(pdf.output())


def render_csv(expenses: List[Dict[str, Any]]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_FIELDS, extrasaction="ignore")
    writer.writeheader()
    for expense in expenses:
        writer.writerow({name: expense.get(name, "") for name in CSV_FIELDS})
    return output.getvalue()


def _upload(buffer: io.BytesIO, s3_key: str, content_type: str) -> Optional[str]:
    try:
        s3.upload_fileobj(buffer, settings.S3_BUCKET_NAME, s3_key, ExtraArgs={"ContentType": content_type})
        return f"https://{settings.S3_BUCKET_NAME}.s3.{settings.S3_REGION}.amazonaws.com/{s3_key}"
    except ClientError as e:
        logger.error(f"Failed to upload {s3_key}: {e}")
        return None


def generate_and_upload_pdf(user_id: str, month: str, report: AnalyticsReport, report_id: str) -> Optional[str]:
    buffer = io.BytesIO(render_pdf(month, report))
    return _upload(buffer, f"reports/{user_id}/{report_id}.pdf", "application/pdf")


def generate_and_upload_csv(user_id: str, expenses: List[Dict[str, Any]], report_id: str) -> Optional[str]:
    buffer = io.BytesIO(render_csv(expenses).encode())
    return _upload(buffer, f"reports/{user_id}/{report_id}.csv", "text/csv")
