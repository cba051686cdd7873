from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.db import dynamo
from app.models.service_record import ServiceRecordCreate, ServiceRecordInDB, ServiceRecordPublic
from app.routers.auth import get_current_user_id
from app.routers.fuel_expenses import local_timestamp, make_sort_key

router = APIRouter()


@router.post("/", response_model=ServiceRecordPublic, status_code=status.HTTP_201_CREATED)
def create_service_record(record: ServiceRecordCreate, user_id: str = Depends(get_current_user_id)):
    if not dynamo.get_vehicle(user_id, record.vehicle_id):
        raise HTTPException(status_code=404, detail=f"Vehicle {record.vehicle_id} not found")

    data = record.model_dump(mode="json")
    data["date"] = local_timestamp(record.date)
    record_db = ServiceRecordInDB(user_id=user_id, record_id=make_sort_key(data["date"]), **data)
    if not dynamo.put_service_record(record_db.model_dump()):
        raise HTTPException(status_code=500, detail="Failed to save service record")
    return ServiceRecordPublic(**record_db.model_dump())


@router.get("/", response_model=List[ServiceRecordPublic])
def list_service_records(
    vehicle_id: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
):
    records = dynamo.get_service_records_for_user(user_id, vehicle_id)
    return sorted(records, key=lambda r: r["record_id"], reverse=True)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service_record(record_id: str, user_id: str = Depends(get_current_user_id)):
    if not dynamo.delete_service_record(user_id, record_id):
        raise HTTPException(status_code=404, detail="Service record not found")
    return None
