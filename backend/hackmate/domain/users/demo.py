"""Demo accounts for local runs."""

from __future__ import annotations

from hackmate.infra.memory import MemoryDatabase

DEMO_USERS = [
	{
		"id": "user_alice",
		"username": "alice",
		"email": "alice@example.com",
		"display_name": "Alice Chen",
		"bio": "Full-stack dev, loves Rust and hackathon pizza.",
		"skills": ["React", "Rust", "PostgreSQL"],
	},
	{
		"id": "user_bob",
		"username": "bob",
		"email": "bob@example.com",
		"display_name": "Bob Okafor",
		"bio": "ML tinkerer looking for a frontend partner.",
		"skills": ["Python", "PyTorch"],
	},
	{
		"id": "user_carol",
		"username": "carol",
		"email": "carol@example.com",
		"display_name": "Carol Silva",
		"bio": "Designer who ships.",
		"skills": ["Figma", "TypeScript"],
	},
]


def seed_memory(db: MemoryDatabase) -> int:
	for user in DEMO_USERS:
		db.add_user(
			user["id"],
			username=user["username"],
			display_name=user["display_name"],
			email=user["email"],
			bio=user["bio"],
			skills=tuple(user["skills"]),
		)
	return len(DEMO_USERS)
