"""Create database schema, the bootstrap admin and demo listings for development."""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from manzil.core.config import settings
from manzil.core.security import hash_password
from manzil.db.session import SessionLocal, engine
from manzil.models import Listing, Project, User
from manzil.models.base import Base
from manzil.models.listing import ListingStatus, PropertyCategory, PropertyType
from manzil.models.project import ProjectStatus
from manzil.models.user import UserRole
from manzil.repositories import users as users_repo
from manzil.services import sequence

ADMIN_UID = "admin-bootstrap"

LISTINGS = [
	{
		"id": "seed-shahr-e-naw-villa",
		"title": "4 Bedroom Villa in Shahr-e-Naw",
		"description": "Detached house with garden, two kitchens and a generator backup.",
		"price": 18_500_000,
		"price_in_dollar": 260_000,
		"property_type": PropertyType.SALE,
		"property_category": PropertyCategory.HOUSE,
		"location": {
			"address": "Street 4, Shahr-e-Naw",
			"city": "Kabul",
			"state": "Kabul",
			"zip_code": "",
			"district": "District 4",
			"latitude": 34.5337,
			"longitude": 69.1731,
		},
		"bedrooms": 4,
		"bathrooms": 3,
		"area": 450,
		"is_featured": True,
		"image_urls": ["https://picsum.photos/seed/shahrenaw/800/600"],
	},
	{
		"id": "seed-karte-4-apartment",
		"title": "2 Bedroom Apartment, Karte 4",
		"description": "Third floor apartment close to Kabul University.",
		"price": 25_000,
		"property_type": PropertyType.RENT,
		"property_category": PropertyCategory.APARTMENT,
		"location": {
			"address": "Karte 4 Main Road",
			"city": "Kabul",
			"state": "Kabul",
			"zip_code": "",
			"district": "District 3",
			"latitude": 34.5079,
			"longitude": 69.1356,
		},
		"bedrooms": 2,
		"bathrooms": 1,
		"area": 110,
		"furnished": True,
		"image_urls": ["https://picsum.photos/seed/karte4/800/600"],
	},
	{
		"id": "seed-kart-e-naw-bai-wafa",
		"title": "Bai-wafa House near Kart-e-Naw Market",
		"description": "Three bedroom house offered on bai-wafa terms.",
		"price": 3_200_000,
		"property_type": PropertyType.BAI_WAFA,
		"property_category": PropertyCategory.HOUSE,
		"location": {
			"address": "Kart-e-Naw Market Street",
			"city": "Kabul",
			"state": "Kabul",
			"zip_code": "",
			"district": "District 8",
		},
		"bedrooms": 3,
		"bathrooms": 2,
		"image_urls": ["https://picsum.photos/seed/kartenaw/800/600"],
	},
]

PROJECTS = [
	{
		"id": "seed-kabul-heights",
		"name": "Kabul Heights Residences",
		"description": "Twelve storey residential towers with underground parking.",
		"developer": "Kabul Heights Construction",
		"developed_by": "Kabul Heights Construction",
		"location": {
			"address": "Darulaman Road",
			"city": "Kabul",
			"state": "Kabul",
			"zip_code": "",
			"district": "District 6",
			"latitude": 34.4781,
			"longitude": 69.1214,
		},
		"status": ProjectStatus.UNDER_CONSTRUCTION,
		"project_types": [
			{"type": "apartment", "bedrooms": 2, "bathrooms": 2, "area": 120, "price_range": {"min": 4_000_000, "max": 5_500_000}},
			{"type": "penthouse", "bedrooms": 4, "bathrooms": 3, "area": 260, "price_range": {"min": 12_000_000, "max": 14_000_000}},
		],
		"price_range": {"min": 4_000_000, "max": 14_000_000},
		"features": {"main_features": ["Underground parking", "Central heating"]},
		"image_urls": ["https://picsum.photos/seed/kabulheights/800/600"],
	},
]


async def create_schema() -> None:
	"""Create the database schema if it does not already exist."""

	async with engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)


async def seed_admin() -> str:
	"""Ensure the bootstrap admin exists and return its uid."""

	email = settings.bootstrap_admin_email.strip().lower()
	async with SessionLocal() as session:
		async with session.begin():
			if email:
				user = await users_repo.get_by_email(session, email)
			else:
				user = await session.get(User, ADMIN_UID)
			if user is None:
				user = User(
					uid=ADMIN_UID,
					email=email or "admin@manzil.local",
					display_name="Administrator",
					role=UserRole.ADMIN,
					password_hash=hash_password(settings.bootstrap_admin_password or "change-me"),
					created_at=datetime.now(timezone.utc),
					specialties=[],
				)
				session.add(user)
			else:
				user.role = UserRole.ADMIN
				if settings.bootstrap_admin_password:
					user.password_hash = hash_password(settings.bootstrap_admin_password)
			return user.uid


async def seed_listings(admin_uid: str) -> None:
	"""Insert or refresh demo listings; new ones get the next property IDs."""

	async with SessionLocal() as session:
		async with session.begin():
			for data in LISTINGS:
				fields = {key: value for key, value in data.items() if key != "id"}
				listing = await session.get(Listing, data["id"])
				if listing is None:
					now = datetime.now(timezone.utc)
					listing = Listing(
						id=data["id"],
						property_id=await sequence.next_property_id(session),
						status=ListingStatus.ACTIVE,
						created_by=admin_uid,
						created_at=now,
						updated_at=now,
						pending_approval=False,
						pending_delete=False,
					)
					session.add(listing)
				for key, value in fields.items():
					setattr(listing, key, value)


async def seed_projects(admin_uid: str) -> None:
	async with SessionLocal() as session:
		async with session.begin():
			for data in PROJECTS:
				fields = {key: value for key, value in data.items() if key != "id"}
				project = await session.get(Project, data["id"])
				if project is None:
					now = datetime.now(timezone.utc)
					project = Project(
						id=data["id"],
						project_id=await sequence.next_project_id(session),
						created_by=admin_uid,
						created_at=now,
						updated_at=now,
						development_updates=[],
						payment_plans=[],
						floor_plans=[],
					)
					session.add(project)
				for key, value in fields.items():
					setattr(project, key, value)


async def main() -> None:
	await create_schema()
	admin_uid = await seed_admin()
	await seed_listings(admin_uid)
	await seed_projects(admin_uid)
	print("Database schema ensured and demo data seeded.")


if __name__ == "__main__":
	asyncio.run(main())
