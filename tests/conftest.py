"""Shared fixtures: an in-memory store seeded with users and cars."""

import pytest

from src.car_rental.domain.entities.car import Car, EngineType
from src.car_rental.domain.entities.user import User, UserRole
from src.car_rental.domain.value_objects.auth import Identity, PasswordHasher
from src.car_rental.infrastructure.repositories.memory_repositories import (
    InMemoryBookedCarRepository,
    InMemoryBookingRepository,
    InMemoryCarRepository,
    InMemoryStore,
    InMemoryUserRepository,
)

ADMIN_ID = 1
ALICE_ID = 2
BOB_ID = 3
PASSWORD = "secret123"


@pytest.fixture
def store():
    """Store with an admin, two customers and cars 10, 11 and 12."""
    store = InMemoryStore()
    password_hash = PasswordHasher.create_password_hash(PASSWORD)

    for user_id, name, role in [
        (ADMIN_ID, "admin", UserRole.ADMIN),
        (ALICE_ID, "alice", UserRole.USER),
        (BOB_ID, "bob", UserRole.USER),
    ]:
        user = User(name, f"{name}@example.com", password_hash, role=role, user_id=user_id)
        store.users[user_id] = user
        store.next_id("users", user_id)

    for car_id, brand, model, capacity, kind in [
        (10, "Toyota", "Corolla", 1.6, EngineType.PETROL),
        (11, "Volkswagen", "Golf", 2.0, EngineType.DIESEL),
        (12, "Toyota", "Prius", 1.8, EngineType.HYBRID),
    ]:
        store.cars[car_id] = Car(brand, model, capacity, kind, car_id=car_id)
        store.next_id("cars", car_id)

    return store


@pytest.fixture
def user_repository(store):
    return InMemoryUserRepository(store)


@pytest.fixture
def car_repository(store):
    return InMemoryCarRepository(store)


@pytest.fixture
def booking_repository(store):
    return InMemoryBookingRepository(store)


@pytest.fixture
def booked_car_repository(store):
    return InMemoryBookedCarRepository(store)


@pytest.fixture
def admin():
    return Identity(user_id=ADMIN_ID, role=UserRole.ADMIN)


@pytest.fixture
def alice():
    return Identity(user_id=ALICE_ID, role=UserRole.USER)


@pytest.fixture
def bob():
    return Identity(user_id=BOB_ID, role=UserRole.USER)
