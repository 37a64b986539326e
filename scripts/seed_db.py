import asyncio
import os
import sys

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from attendance_tracker.config import settings
from attendance_tracker.database import AsyncSessionLocal
from attendance_tracker.seed import seed_demo_data


async def seed():
    async with AsyncSessionLocal() as session:
        created = await seed_demo_data(session, settings.DEMO_TEACHER_USERNAME)
    if created:
        print(f"Seeded demo class for teacher '{settings.DEMO_TEACHER_USERNAME}'.")
    else:
        print("Database already contains demo data. Skipping seed.")


if __name__ == "__main__":
    asyncio.run(seed())
