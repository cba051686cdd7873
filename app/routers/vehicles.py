from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.db import dynamo
from app.models.vehicle import VehicleCreate, VehicleInDB, VehiclePublic, VehicleUpdate
from app.routers.auth import get_current_user_id

router = APIRouter()


@router.post("/", response_model=VehiclePublic, status_code=status.HTTP_201_CREATED)
def create_vehicle(vehicle: VehicleCreate, user_id: str = Depends(get_current_user_id)):
    vehicle_db = VehicleInDB(user_id=user_id, **vehicle.model_dump())
    if vehicle_db.next_service_mileage is None:
        vehicle_db.next_service_mileage = vehicle_db.current_mileage + vehicle_db.service_interval
    if not dynamo.put_vehicle(vehicle_db.model_dump()):
        raise HTTPException(status_code=500, detail="Failed to save vehicle")
    return VehiclePublic(**vehicle_db.model_dump())


@router.get("/", response_model=List[VehiclePublic])
def list_vehicles(user_id: str = Depends(get_current_user_id)):
    return dynamo.get_vehicles_for_user(user_id)


@router.put("/{vehicle_id}", response_model=VehiclePublic)
def update_vehicle(
    vehicle_id: str,
    vehicle_update: VehicleUpdate,
    user_id: str = Depends(get_current_user_id),
):
    mutable_fields = vehicle_update.model_dump(exclude_unset=True)
    if not mutable_fields:
        raise HTTPException(status_code=400, detail="No fields to update")
    mutable_fields["updated_at"] = datetime.utcnow().isoformat()

    updated = dynamo.update_vehicle(user_id, vehicle_id, mutable_fields)
    if not updated:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return updated


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vehicle(vehicle_id: str, user_id: str = Depends(get_current_user_id)):
    if not dynamo.delete_vehicle(user_id, vehicle_id):
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return None
