# portal/db/seed.py
import asyncio
import random

from faker import Faker
from tqdm import tqdm

from portal.core.config import settings
from portal.core.security import CredentialService
from portal.db.session import close_db_pool, connect_db_pool, get_pool
from portal.repositories.account_repo import AccountRepository
from portal.repositories.profile_repo import ProfileRepository

fake = Faker("en_US")
fake_bn = Faker("bn_BD")

NUM_ACCOUNTS = 50
MAX_PROFILES_PER_ACCOUNT = 2
SEED_PASSWORD = "Portal#2024"

BOARDS = ["Dhaka", "Rajshahi", "Chattogram", "Cumilla", "Jashore", "Sylhet", "Barishal", "Dinajpur"]
GROUPS = ["Science", "Humanities", "Business Studies"]


def random_mobile() -> str:
    return f"01{random.choice('3456789')}{random.randint(0, 99_999_999):08d}"


def exam_record(exam: str, year: int) -> dict:
    return {
        "exam": exam,
        "roll": str(random.randint(100000, 999999)),
        "group": random.choice(GROUPS),
        "group_other": None,
        "board": random.choice(BOARDS),
        "board_other": None,
        "result_type": "GPA",
        "result": round(random.uniform(3.0, 5.0), 2),
        "year": str(year),
    }


def profile_for(account: dict) -> dict:
    dob = fake.date_of_birth(minimum_age=18, maximum_age=30)
    has_nid = random.random() < 0.7
    mobile = random_mobile()
    return {
        "user_id": account["id"],
        "name": f"{account['first_name']} {account['last_name']}",
        "name_bn": fake_bn.name(),
        "father": fake.name_male(),
        "father_bn": fake_bn.name(),
        "mother": fake.name_female(),
        "mother_bn": fake_bn.name(),
        "dob": dob,
        "gender": random.choice(["Male", "Female"]),
        "nid": "1" if has_nid else "0",
        "nid_no": str(fake.unique.random_number(digits=10, fix_len=True)) if has_nid else None,
        "breg": None if has_nid else str(fake.unique.random_number(digits=17, fix_len=True)),
        "passport": None,
        "email": account["email"],
        "mobile": mobile,
        "confirm_mobile": mobile,
        "nationality": "Bangladeshi",
        "religion": random.choice(["Islam", "Hinduism", "Buddhism", "Christianity"]),
        "marital_status": random.choice(["Single", "Married"]),
        "quota": "Non Quota",
        "dep_status": None,
        "present_address": {
            "careof": fake.name_male(),
            "village": fake.street_name(),
            "district": random.choice(BOARDS),
            "upazila": fake.city(),
            "post": fake.city(),
            "postcode": fake.postcode()[:4],
        },
        "ssc": exam_record("SSC", dob.year + 16),
        "hsc": exam_record("HSC", dob.year + 18),
    }


async def seed():
    credentials = CredentialService.from_settings(settings)
    await connect_db_pool()
    pool = await get_pool()
    if pool is None:
        raise RuntimeError("Database pool could not be initialized")

    # one digest is enough for every seeded account
    hashed_password = credentials.hash_password(SEED_PASSWORD)

    async with pool.acquire() as conn:
        accounts = AccountRepository(conn)
        profiles = ProfileRepository(conn)

        created = []
        for _ in tqdm(range(NUM_ACCOUNTS), desc="Creating accounts"):
            account = await accounts.create({
                "first_name": fake.first_name(),
                "last_name": fake.last_name(),
                "email": fake.unique.email().lower(),
                "phone": random_mobile(),
                "role": random.choices(["USER", "SELLER", "ADMIN"], weights=[0.85, 0.10, 0.05])[0],
                "password": hashed_password,
            })
            created.append(account)

        for account in tqdm(created, desc="Creating profiles"):
            for _ in range(random.randint(0, MAX_PROFILES_PER_ACCOUNT)):
                await profiles.create(profile_for(account))

    await close_db_pool()
    print(f"Seed complete. Every account logs in with {SEED_PASSWORD!r}.")


if __name__ == "__main__":
    asyncio.run(seed())
