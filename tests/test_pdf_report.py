from datetime import datetime

from app.utils import pdf_report
from app.utils.analyzer import compute_analytics

fuel = [
    {"date": "2025-11-01T13:00:00", "location": "Costco", "mileage": 1300, "gallons": 10,
     "price_per_unit": 3.0, "total": 30.0, "payment_type": "Card", "notes": "ignored"},
    {"date": "2025-11-10T18:00:00", "location": "Shell", "mileage": 1350, "gallons": 5,
     "price_per_unit": 4.0, "total": 20.0, "payment_type": "Cash"},
]
vehicle = {"make": "Honda", "model": "Civic", "current_mileage": 1350,
           "next_service_mileage": 4000, "rated_mpg": 30}


def test_render_pdf():
    report = compute_analytics(fuel, [], vehicle, datetime(2025, 11, 30, 23, 59, 59))
    content = pdf_report.render_pdf("2025-11", report)
    assert content.startswith(b"%PDF")


def test_render_pdf_for_empty_report():
    report = compute_analytics([], [], None, datetime(2025, 11, 30))
    assert pdf_report.render_pdf("2025-11", report).startswith(b"%PDF")


def test_render_csv():
    lines = pdf_report.render_csv(fuel).splitlines()
    assert lines[0] == "date,location,mileage,gallons,price_per_unit,total,payment_type"
    assert lines[1] == "2025-11-01T13:00:00,Costco,1300,10,3.0,30.0,Card"
    assert len(lines) == 3


def test_upload_returns_url(monkeypatch):
    calls = []
    monkeypatch.setattr(pdf_report.s3, "upload_fileobj", lambda *args, **kwargs: calls.append((args, kwargs)))
    url = pdf_report.generate_and_upload_csv("user-1", fuel, "report-1")
    assert url.endswith("/reports/user-1/report-1.csv")
    assert calls[0][0][2] == "reports/user-1/report-1.csv"
    assert calls[0][1]["ExtraArgs"] == {"ContentType": "text/csv"}
