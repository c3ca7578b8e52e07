"""
Seed script to populate the database with Kerala travellers and a few
relationships for trying out following, matching and chat.
Run this script with: python seed_users.py
"""
import logging
from app import app, db
from models.users import User
from services import relationships

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SEED_USERS = [
    {
        "id": "seed_user_001",
        "name": "Priya Nair",
        "email": "priya@wandermatch.com",
        "age": 26,
        "gender": "female",
        "bio": "Love exploring Kerala backwaters and hill stations. Looking for travel companions to share amazing experiences!",
        "current_city": "Kochi",
        "current_district": "Ernakulam",
        "is_online": True,
    },
    {
        "id": "seed_user_002",
        "name": "Arjun Kumar",
        "email": "arjun@wandermatch.com",
        "age": 29,
        "gender": "male",
        "bio": "Local guide from Munnar with 5+ years experience. Can show you the best tea gardens, trekking spots, and hidden gems!",
        "current_city": "Munnar",
        "current_district": "Idukki",
        "is_online": True,
    },
    {
        "id": "seed_user_003",
        "name": "Maya Pillai",
        "email": "maya@wandermatch.com",
        "age": 24,
        "gender": "female",
        "bio": "Beach lover from Varkala. Always up for sunset watching, water sports, and coastal adventures!",
        "current_city": "Varkala",
        "current_district": "Thiruvananthapuram",
        "is_online": False,
    },
    {
        "id": "seed_user_004",
        "name": "Ravi Menon",
        "email": "ravi@wandermatch.com",
        "age": 31,
        "gender": "male",
        "bio": "Professional photographer capturing Kerala's beauty. Join me for photo walks and learn photography tips!",
        "current_city": "Alleppey",
        "current_district": "Alappuzha",
        "is_online": True,
    },
    {
        "id": "seed_user_005",
        "name": "Anjali Raj",
        "email": "anjali@wandermatch.com",
        "age": 27,
        "gender": "female",
        "bio": "Ayurveda enthusiast exploring traditional wellness centers across Kerala. Seeking mindful travel companions.",
        "current_city": "Kovalam",
        "current_district": "Thiruvananthapuram",
        "is_online": False,
    },
]

SEED_FOLLOWS = [
    ("seed_user_001", "seed_user_002"),
    ("seed_user_001", "seed_user_004"),
    ("seed_user_002", "seed_user_001"),
    ("seed_user_002", "seed_user_003"),
    ("seed_user_003", "seed_user_004"),
    ("seed_user_004", "seed_user_001"),
    ("seed_user_005", "seed_user_002"),
]

# Two reciprocated pairs, so two matches and two romantic chat rooms
SEED_LIKES = [
    ("seed_user_001", "seed_user_002"),
    ("seed_user_002", "seed_user_001"),
    ("seed_user_001", "seed_user_004"),
    ("seed_user_003", "seed_user_004"),
    ("seed_user_004", "seed_user_003"),
]


def seed_users():
    created = 0
    for user_data in SEED_USERS:
        if db.session.get(User, user_data["id"]):
            logger.info(f"User {user_data['name']} already exists, skipping")
            continue
        db.session.add(User(**user_data))
        created += 1
    db.session.commit()
    logger.info(f"Created {created} users")


def seed_relationships():
    for follower_id, followee_id in SEED_FOLLOWS:
        relationships.follow(follower_id, followee_id)
    logger.info(f"Ensured {len(SEED_FOLLOWS)} follow relationships")

    matches = 0
    for liker_id, liked_id in SEED_LIKES:
        _, match = relationships.like(liker_id, liked_id)
        if match is not None:
            matches += 1
    logger.info(f"Ensured {len(SEED_LIKES)} likes, {matches} of them completed a match")


if __name__ == "__main__":
    with app.app_context():
        db.create_all()
        seed_users()
        seed_relationships()
        logger.info("Seeding complete")
