"""
Health Check Router
Liveness endpoint plus a connectivity check of the AWS services the API uses.
"""
from fastapi import APIRouter
from datetime import datetime, timezone
import logging
from botocore.exceptions import ClientError

from app.core.config import settings
from app.db import dynamo
from app.utils.pdf_report import s3

router = APIRouter()
logger = logging.getLogger(__name__)

TABLES = {
    "users": (dynamo.users_table, settings.DYNAMO_USERS_TABLE),
    "fuel_expenses": (dynamo.fuel_expenses_table, settings.DYNAMO_FUEL_EXPENSES_TABLE),
    "service_records": (dynamo.service_records_table, settings.DYNAMO_SERVICE_RECORDS_TABLE),
    "vehicles": (dynamo.vehicles_table, settings.DYNAMO_VEHICLES_TABLE),
    "payments": (dynamo.payments_table, settings.DYNAMO_PAYMENTS_TABLE),
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns API status.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": _now(),
    }


@router.get("/status")
async def aws_services_status():
    """
    Check connectivity of every DynamoDB table and the reports S3 bucket.
    """
    status = {
        "timestamp": _now(),
        "services": {}
    }

    dynamodb_status = {"connected": False, "tables": {}}
    for key, (table, name) in TABLES.items():
        try:
            table.scan(Limit=1)
            dynamodb_status["tables"][key] = {
                "name": name,
                "status": "accessible",
                "region": settings.DYNAMO_REGION,
            }
        except Exception as e:
            logger.error(f"DynamoDB check failed for {name}: {str(e)}")
            dynamodb_status["tables"][key] = {"name": name, "status": "error", "error": str(e)}

    dynamodb_status["connected"] = all(
        table["status"] == "accessible" for table in dynamodb_status["tables"].values()
    )
    status["services"]["dynamodb"] = dynamodb_status

    s3_status = {
        "connected": False,
        "bucket": settings.S3_BUCKET_NAME,
        "region": settings.S3_REGION,
        "error": None
    }
    try:
        s3.head_bucket(Bucket=settings.S3_BUCKET_NAME)
        s3_status["connected"] = True
        s3_status["status"] = "accessible"
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        s3_status["error"] = f"{error_code}: {str(e)}"
        s3_status["status"] = "error"
        logger.error(f"S3 check failed: {str(e)}")
    except Exception as e:
        s3_status["error"] = str(e)
        s3_status["status"] = "error"
        logger.error(f"S3 check failed: {str(e)}")

    status["services"]["s3"] = s3_status

    all_connected = all(
        service.get("connected", False)
        for service in status["services"].values()
    )
    status["overall_status"] = "healthy" if all_connected else "degraded"

    return status
