import uuid
from datetime import datetime

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking
from app.models.user import User
from app.models.vehicle import Vehicle
from app.repositories.vehicle_repository import VehicleRepository
from tests.conftest import auth_for

VEHICLE = {"make": "Suzuki", "model": "Wagon R", "year": 2018, "license_plate": "cab 9876"}


@pytest.mark.asyncio
async def test_add_vehicle(client: AsyncClient, owner_user: User):
    response = await client.post("/api/vehicles", json=VEHICLE, headers=auth_for(owner_user))
    assert response.status_code == 201
    data = response.json()
    assert data["license_plate"] == "CAB 9876"
    assert data["owner_id"] == str(owner_user.id)


@pytest.mark.asyncio
@pytest.mark.parametrize("year", [1899, datetime.now().year + 2])
async def test_add_vehicle_year_out_of_range(client: AsyncClient, owner_user: User, year: int):
    response = await client.post("/api/vehicles", json={**VEHICLE, "year": year}, headers=auth_for(owner_user))
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_add_vehicle_next_year_allowed(client: AsyncClient, owner_user: User):
    next_year = datetime.now().year + 1
    response = await client.post("/api/vehicles", json={**VEHICLE, "year": next_year}, headers=auth_for(owner_user))
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_provider_cannot_add_vehicle(client: AsyncClient, provider_user: User):
    response = await client.post("/api/vehicles", json=VEHICLE, headers=auth_for(provider_user))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_my_vehicles(client: AsyncClient, owner_user: User, other_owner: User, vehicle: Vehicle):
    response = await client.get("/api/vehicles", headers=auth_for(owner_user))
    assert response.status_code == 200
    assert [v["id"] for v in response.json()] == [str(vehicle.id)]

    response = await client.get("/api/vehicles", headers=auth_for(other_owner))
    assert response.json() == []


@pytest.mark.asyncio
async def test_delete_vehicle(client: AsyncClient, db: AsyncSession, owner_user: User, vehicle: Vehicle):
    vehicle_id = vehicle.id
    response = await client.delete(f"/api/vehicles/{vehicle_id}", headers=auth_for(owner_user))
    assert response.status_code == 204
    assert await VehicleRepository(db).get_by_id(vehicle_id) is None


@pytest.mark.asyncio
async def test_delete_other_owners_vehicle(client: AsyncClient, db: AsyncSession, other_owner: User, vehicle: Vehicle):
    response = await client.delete(f"/api/vehicles/{vehicle.id}", headers=auth_for(other_owner))
    assert response.status_code == 404
    assert response.json() == {"error": "Vehicle not found or not owned by you"}
    assert await VehicleRepository(db).get_by_id(vehicle.id) is not None


@pytest.mark.asyncio
async def test_delete_unknown_vehicle(client: AsyncClient, owner_user: User):
    response = await client.delete(f"/api/vehicles/{uuid.uuid4()}", headers=auth_for(owner_user))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_vehicle_with_bookings_conflicts(
    client: AsyncClient, owner_user: User, vehicle: Vehicle, booking: Booking
):
    response = await client.delete(f"/api/vehicles/{vehicle.id}", headers=auth_for(owner_user))
    assert response.status_code == 409
