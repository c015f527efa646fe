import asyncio
import sys
import os

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from inkwell.db.session import async_session_maker
from inkwell.services.poem_service import find_likes_count_drift


async def check_counters() -> int:
    async with async_session_maker() as db:
        drift = await find_likes_count_drift(db)

    if not drift:
        print("All poems: likes_count matches likes.")
        return 0

    print(f"{len(drift)} poem(s) with likes_count drift:")
    for poem, actual in drift:
        print(f"  - {poem.id} '{poem.title[:30]}': stored={poem.likes_count} actual={actual}")
    return 1

if __name__ == "__main__":
    sys.exit(asyncio.run(check_counters()))
