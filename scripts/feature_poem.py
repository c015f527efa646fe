import asyncio
import sys
import os
from uuid import UUID

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from inkwell.db.session import async_session_maker
from inkwell.services.poem_service import set_featured


async def feature_poem(poem_id: UUID, featured: bool):
    """Mark a poem as featured (shown on /poems/featured) or clear the flag."""
    async with async_session_maker() as session:
        poem = await set_featured(session, poem_id, featured)
        if not poem:
            print(f"Error: Poem '{poem_id}' not found.")
            return
        await session.commit()
        state = "featured" if featured else "no longer featured"
        print(f"Success: '{poem.title}' by {poem.author.username} is {state}.")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/feature_poem.py <poem_id> [--off]")
        sys.exit(1)

    try:
        target = UUID(sys.argv[1])
    except ValueError:
        print(f"Error: '{sys.argv[1]}' is not a poem id.")
        sys.exit(1)
    asyncio.run(feature_poem(target, featured="--off" not in sys.argv[2:]))
