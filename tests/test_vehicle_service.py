from unittest.mock import AsyncMock

import pytest

from src.application.repositories import DuplicateKeyError
from src.application.services.vehicle_service import normalize_plate, parse_vehicle_type
from src.domain.common import Role, VehicleType
from src.domain.entities import Identity, Vehicle
from src.domain.exceptions import NotFoundError, ConflictError, InvalidError, ForbiddenError


@pytest.fixture
def other_user():
    return Identity(user_id="user-2", role=Role.USER)


class TestVehicleRegistry:
    async def test_create_vehicle_records_owner(self, vehicle_service, attendant):
        vehicle = await vehicle_service.create_vehicle(attendant, " ab-123 ", vehicle_type="motorcycle",
                                                       brand="Honda", color="Red")

        assert vehicle.id is not None
        assert vehicle.license_plate == "AB-123"
        assert vehicle.vehicle_type == VehicleType.MOTORCYCLE
        assert vehicle.owner_id == "user-1"
        assert vehicle.created_at is not None

    async def test_create_duplicate_plate_conflicts(self, vehicle_service, attendant, other_user):
        await vehicle_service.create_vehicle(attendant, "DUP1")

        with pytest.raises(ConflictError):
            await vehicle_service.create_vehicle(other_user, "dup1")

    async def test_create_rejects_unknown_type(self, vehicle_service, attendant):
        with pytest.raises(InvalidError):
            await vehicle_service.create_vehicle(attendant, "TANK1", vehicle_type="tank")

    async def test_list_vehicles_scoped_to_owner(self, vehicle_service, attendant, other_user, admin):
        await vehicle_service.create_vehicle(attendant, "MINE1")
        await vehicle_service.create_vehicle(other_user, "THEIRS1")

        assert [v.license_plate for v in await vehicle_service.list_vehicles(attendant)] == ["MINE1"]
        assert [v.license_plate for v in await vehicle_service.list_vehicles(admin)] == ["MINE1", "THEIRS1"]

    async def test_get_vehicle_of_another_user_forbidden(self, vehicle_service, attendant, other_user, admin):
        vehicle = await vehicle_service.create_vehicle(attendant, "PRIV1")

        with pytest.raises(ForbiddenError):
            await vehicle_service.get_vehicle(vehicle.id, other_user)

        assert (await vehicle_service.get_vehicle(vehicle.id, admin)).license_plate == "PRIV1"

    async def test_get_missing_vehicle(self, vehicle_service, attendant):
        with pytest.raises(NotFoundError):
            await vehicle_service.get_vehicle(404, attendant)

    async def test_update_vehicle(self, vehicle_service, attendant):
        vehicle = await vehicle_service.create_vehicle(attendant, "OLD1", color="Blue")

        updated = await vehicle_service.update_vehicle(
            vehicle.id, attendant, {"license_plate": "new1", "color": "Green", "brand": None}
        )

        assert updated.license_plate == "NEW1"
        assert updated.color == "Green"
        assert updated.owner_id == "user-1"

    async def test_update_to_taken_plate_conflicts(self, vehicle_service, attendant):
        await vehicle_service.create_vehicle(attendant, "TAKEN1")
        vehicle = await vehicle_service.create_vehicle(attendant, "FREE1")

        with pytest.raises(ConflictError):
            await vehicle_service.update_vehicle(vehicle.id, attendant, {"license_plate": "TAKEN1"})

    async def test_update_by_other_user_forbidden(self, vehicle_service, attendant, other_user):
        vehicle = await vehicle_service.create_vehicle(attendant, "LOCK1")

        with pytest.raises(ForbiddenError):
            await vehicle_service.update_vehicle(vehicle.id, other_user, {"color": "Pink"})

    async def test_delete_vehicle(self, vehicle_service, attendant):
        vehicle = await vehicle_service.create_vehicle(attendant, "BYE1")

        await vehicle_service.delete_vehicle(vehicle.id, attendant)

        with pytest.raises(NotFoundError):
            await vehicle_service.get_vehicle(vehicle.id, attendant)

    async def test_delete_vehicle_with_history_conflicts(self, vehicle_service, parking_service, admin,
                                                         init_parking_spaces):
        _, vehicle, _ = await parking_service.register_vehicle_entry(1, "HIST1")

        with pytest.raises(ConflictError, match="parking records"):
            await vehicle_service.delete_vehicle(vehicle.id, admin)

    async def test_unowned_vehicle_visible_to_everyone(self, vehicle_service, parking_service, other_user,
                                                       init_parking_spaces):
        _, vehicle, _ = await parking_service.register_vehicle_entry(1, "WALKIN1")

        assert vehicle.owner_id is None
        assert (await vehicle_service.get_vehicle(vehicle.id, other_user)).license_plate == "WALKIN1"

    async def test_search_by_plate_fragment(self, vehicle_service, attendant):
        await vehicle_service.create_vehicle(attendant, "ABC100")
        await vehicle_service.create_vehicle(attendant, "XABC20")
        await vehicle_service.create_vehicle(attendant, "ZZZ999")

        found = await vehicle_service.search_by_plate("abc")

        assert [v.license_plate for v in found] == ["ABC100", "XABC20"]

    async def test_search_treats_wildcards_literally(self, vehicle_service, attendant):
        await vehicle_service.create_vehicle(attendant, "AB_1")
        await vehicle_service.create_vehicle(attendant, "ABX1")
        await vehicle_service.create_vehicle(attendant, "50%OFF")
        await vehicle_service.create_vehicle(attendant, "500FF")

        assert [v.license_plate for v in await vehicle_service.search_by_plate("b_")] == ["AB_1"]
        assert [v.license_plate for v in await vehicle_service.search_by_plate("0%")] == ["50%OFF"]
        assert await vehicle_service.search_by_plate("\\") == []

    async def test_update_null_clears_optional_fields(self, vehicle_service, attendant):
        vehicle = await vehicle_service.create_vehicle(attendant, "NULL1", brand="Fiat", model="Uno", color="Red")

        updated = await vehicle_service.update_vehicle(
            vehicle.id, attendant, {"brand": None, "color": None, "license_plate": None, "vehicle_type": None}
        )

        assert updated.brand is None
        assert updated.color is None
        assert updated.model == "Uno"
        assert updated.license_plate == "NULL1"
        assert updated.vehicle_type == VehicleType.CAR
        assert (await vehicle_service.get_vehicle(vehicle.id, attendant)).brand is None

class TestResolveOrCreate:
    async def test_reuses_vehicle_inserted_concurrently(self, vehicle_service):
        existing = Vehicle(license_plate="RACE1", id=7)
        vehicle_service.uow = AsyncMock()
        vehicle_service.uow.vehicles.get_by_license_plate = AsyncMock(side_effect=[None, existing])
        vehicle_service.uow.vehicles.add = AsyncMock(side_effect=DuplicateKeyError("taken"))

        vehicle = await vehicle_service.resolve_or_create("race1")

        assert vehicle is existing
        assert vehicle_service.uow.vehicles.get_by_license_plate.await_count == 2

    async def test_conflict_when_plate_vanishes(self, vehicle_service):
        vehicle_service.uow = AsyncMock()
        vehicle_service.uow.vehicles.get_by_license_plate = AsyncMock(return_value=None)
        vehicle_service.uow.vehicles.add = AsyncMock(side_effect=DuplicateKeyError("taken"))

        with pytest.raises(ConflictError):
            await vehicle_service.resolve_or_create("GHOST1")


def test_normalize_plate():
    assert normalize_plate("  abc 12 ") == "ABC 12"
    with pytest.raises(InvalidError):
        normalize_plate("")
    with pytest.raises(InvalidError):
        normalize_plate(None)


def test_parse_vehicle_type():
    assert parse_vehicle_type(None) == VehicleType.CAR
    assert parse_vehicle_type("truck") == VehicleType.TRUCK
    with pytest.raises(InvalidError):
        parse_vehicle_type("spaceship")
