import uuid
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking
from app.models.enums import BookingStatus
from app.models.user import User
from app.models.vehicle import Vehicle
from tests.conftest import auth_for, make_booking


def _booking_body(vehicle_id, provider_id) -> dict:
    return {
        "vehicle_id": str(vehicle_id),
        "provider_id": str(provider_id),
        "description": "Brake pads replacement",
        "service_date": (datetime.now(timezone.utc) + timedelta(days=2)).isoformat(),
    }


async def _count_bookings(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Booking))).scalar_one()


@pytest.mark.asyncio
async def test_create_booking(client: AsyncClient, owner_user: User, vehicle: Vehicle, provider_user: User):
    response = await client.post(
        "/api/bookings",
        json=_booking_body(vehicle.id, provider_user.id),
        headers=auth_for(owner_user),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["vehicle_id"] == str(vehicle.id)
    assert data["provider_id"] == str(provider_user.id)


@pytest.mark.asyncio
async def test_create_booking_foreign_vehicle(
    client: AsyncClient, db: AsyncSession, other_owner: User, vehicle: Vehicle, provider_user: User
):
    response = await client.post(
        "/api/bookings",
        json=_booking_body(vehicle.id, provider_user.id),
        headers=auth_for(other_owner),
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Vehicle not found or not owned by you"}
    assert await _count_bookings(db) == 0


@pytest.mark.asyncio
async def test_create_booking_unknown_vehicle(client: AsyncClient, owner_user: User, provider_user: User):
    response = await client.post(
        "/api/bookings",
        json=_booking_body(uuid.uuid4(), provider_user.id),
        headers=auth_for(owner_user),
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_booking_provider_not_a_provider(
    client: AsyncClient, db: AsyncSession, owner_user: User, other_owner: User, vehicle: Vehicle
):
    response = await client.post(
        "/api/bookings",
        json=_booking_body(vehicle.id, other_owner.id),
        headers=auth_for(owner_user),
    )
    assert response.status_code == 400
    assert "provider" in response.json()["error"].lower()
    assert await _count_bookings(db) == 0


@pytest.mark.asyncio
async def test_create_booking_unknown_provider(client: AsyncClient, owner_user: User, vehicle: Vehicle):
    response = await client.post(
        "/api/bookings",
        json=_booking_body(vehicle.id, uuid.uuid4()),
        headers=auth_for(owner_user),
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_provider_cannot_create_booking(client: AsyncClient, provider_user: User, vehicle: Vehicle):
    response = await client.post(
        "/api/bookings",
        json=_booking_body(vehicle.id, provider_user.id),
        headers=auth_for(provider_user),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_booking_requires_auth(client: AsyncClient, vehicle: Vehicle, provider_user: User):
    response = await client.post("/api/bookings", json=_booking_body(vehicle.id, provider_user.id))
    assert response.status_code == 401
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_create_booking_validation_error_shape(client: AsyncClient, owner_user: User):
    response = await client.post("/api/bookings", json={"description": "x"}, headers=auth_for(owner_user))
    assert response.status_code == 400
    assert "vehicle_id" in response.json()["error"]


@pytest.mark.asyncio
async def test_owner_bookings_include_details(
    client: AsyncClient, owner_user: User, provider_user: User, booking: Booking
):
    response = await client.get("/api/bookings/owner", headers=auth_for(owner_user))
    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["id"] == str(booking.id)
    assert data[0]["vehicle"]["license_plate"] == "CAB-1234"
    assert data[0]["vehicle"]["owner_name"] == owner_user.name
    assert data[0]["provider"] == {"name": provider_user.name, "email": provider_user.email}


@pytest.mark.asyncio
async def test_owner_bookings_exclude_other_owners(client: AsyncClient, other_owner: User, booking: Booking):
    response = await client.get("/api/bookings/owner", headers=auth_for(other_owner))
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_provider_bookings(
    client: AsyncClient, provider_user: User, other_provider: User, booking: Booking
):
    response = await client.get("/api/bookings/provider", headers=auth_for(provider_user))
    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [str(booking.id)]

    response = await client.get("/api/bookings/provider", headers=auth_for(other_provider))
    assert response.json() == []


@pytest.mark.asyncio
async def test_owner_cannot_list_provider_bookings(client: AsyncClient, owner_user: User):
    response = await client.get("/api/bookings/provider", headers=auth_for(owner_user))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_accept_booking(client: AsyncClient, provider_user: User, booking: Booking):
    response = await client.patch(
        f"/api/bookings/{booking.id}/status",
        json={"status": "ACCEPTED"},
        headers=auth_for(provider_user),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "ACCEPTED"


@pytest.mark.asyncio
async def test_full_lifecycle(client: AsyncClient, provider_user: User, booking: Booking):
    for status in ("ACCEPTED", "IN_PROGRESS", "COMPLETED"):
        response = await client.patch(
            f"/api/bookings/{booking.id}/status",
            json={"status": status},
            headers=auth_for(provider_user),
        )
        assert response.status_code == 200
        assert response.json()["status"] == status


@pytest.mark.asyncio
async def test_invalid_transition_leaves_status_unchanged(
    client: AsyncClient, db: AsyncSession, provider_user: User, booking: Booking
):
    response = await client.patch(
        f"/api/bookings/{booking.id}/status",
        json={"status": "COMPLETED"},
        headers=auth_for(provider_user),
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid status transition: PENDING -> COMPLETED"}

    await db.refresh(booking)
    assert BookingStatus(booking.status) == BookingStatus.PENDING


@pytest.mark.asyncio
async def test_other_provider_cannot_update_status(
    client: AsyncClient, db: AsyncSession, other_provider: User, booking: Booking
):
    response = await client.patch(
        f"/api/bookings/{booking.id}/status",
        json={"status": "ACCEPTED"},
        headers=auth_for(other_provider),
    )
    assert response.status_code == 403

    await db.refresh(booking)
    assert BookingStatus(booking.status) == BookingStatus.PENDING


@pytest.mark.asyncio
async def test_update_status_unknown_booking(client: AsyncClient, provider_user: User):
    response = await client.patch(
        f"/api/bookings/{uuid.uuid4()}/status",
        json={"status": "ACCEPTED"},
        headers=auth_for(provider_user),
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Booking not found"}


@pytest.mark.asyncio
async def test_completed_booking_is_final(
    client: AsyncClient, db: AsyncSession, vehicle: Vehicle, provider_user: User
):
    completed = await make_booking(db, vehicle, provider_user, BookingStatus.COMPLETED)
    for status in ("PENDING", "ACCEPTED", "CANCELLED"):
        response = await client.patch(
            f"/api/bookings/{completed.id}/status",
            json={"status": status},
            headers=auth_for(provider_user),
        )
        assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_status_value_rejected(client: AsyncClient, provider_user: User, booking: Booking):
    response = await client.patch(
        f"/api/bookings/{booking.id}/status",
        json={"status": "DONE"},
        headers=auth_for(provider_user),
    )
    assert response.status_code == 400
