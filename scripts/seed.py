"""Seed the database with demo news and comments through the news service."""
import asyncio
import argparse
import random
import time
from newsdesk.cache import CacheManager
from newsdesk.database import engine, async_session, Base
from newsdesk.repositories import SqlCommentStore, SqlNewsStore
from newsdesk.schemas import CommentDto, NewsDto, NewsWithComments
from newsdesk.services.news_service import NewsService

TOPICS = ["python", "fastapi", "postgresql", "redis", "docker", "kubernetes",
          "elections", "weather", "football", "markets", "science", "space"]

async def seed(small: bool = False):
    num_news = 20 if small else 2000
    max_comments = 3 if small else 8

    print(f"Seeding: {num_news} news, up to {max_comments} comments each")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    total_comments = 0
    async with async_session() as session:
        # No cache backend: seeding must not depend on Redis.
        service = NewsService(SqlNewsStore(session), SqlCommentStore(session), CacheManager())
        for i in range(num_news):
            topic = random.choice(TOPICS)
            comments = [
                CommentDto(text=f"Comment {j} on {topic} story {i}")
                for j in range(random.randint(0, max_comments))
            ]
            await service.create(NewsWithComments(
                news=NewsDto(
                    title=f"Story {i}: what's new in {topic}",
                    body=f"A longer report about {topic}. " * random.randint(3, 20),
                ),
                comments=comments,
            ))
            total_comments += len(comments)
            if (i + 1) % 500 == 0:
                await session.commit()
                print(f"  Created {i + 1} news")
        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"Done: {num_news} news, {total_comments} comments in {elapsed:.1f}s")



def main():
    parser = argparse.ArgumentParser(description="Seed the newsdesk database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (20 news)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
