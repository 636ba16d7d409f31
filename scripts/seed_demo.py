"""
Load the demo data set into an empty database.

Usage:
    python scripts/seed_demo.py

Every demo account uses the password "password". Nothing is written when
the users table already has rows.
"""

import asyncio
import sys
import uuid
from datetime import timedelta

from sqlalchemy import func, select

sys.path.insert(0, ".")

from otsnews.config import get_settings
from otsnews.database import Database
from otsnews.engines.articles.sanitizer import sanitize_article_html
from otsnews.engines.articles.tags import normalize_tags
from otsnews.kernel.identity.password import PasswordHasher
from otsnews.kernel.models import (
    Article,
    ArticleStatus,
    ArticleTag,
    Comment,
    Notification,
    NotificationType,
    Section,
    SectionEditorGrant,
    Subsection,
    User,
    UserRole,
)
from otsnews.kernel.models.base import utc_now
from otsnews.logging_config import configure_logging, get_logger

logger = get_logger(__name__)

DEMO_PASSWORD = "password"

USERS = [
    ("Alice Admin", "alice.admin@la.gov", UserRole.ADMIN, "alice"),
    ("Eddie Editor", "eddie.editor@la.gov", UserRole.EDITOR, "eddie"),
    ("John User", "john.user@la.gov", UserRole.USER, "john"),
    ("Guest Visitor", "guest.visitor@la.gov", UserRole.GUEST, "guest"),
]

SECTIONS = [
    ("euc", "EUC", [
        ("incident-management", "Incident Management"),
        ("field-operations", "Field Operations"),
        ("system-admin", "System Admin"),
        ("asset-management", "Asset Management"),
    ]),
    ("hr", "Human Resources", [
        ("benefits", "Benefits"),
        ("careers", "Careers"),
    ]),
    ("general", "General News", []),
]

ARTICLES = [
    {
        "key": "servicenow",
        "title": "ServiceNow Implementation Update",
        "excerpt": "Key updates regarding the new ServiceNow module for Incident Management.",
        "content": (
            "<h2>ServiceNow Migration Successful</h2>"
            "<p>We are pleased to announce that the migration to the new ServiceNow instance for "
            "<strong>Incident Management</strong> has been completed successfully.</p>"
            "<p>All users in the EUC department should now use the new portal for logging tickets.</p>"
            "<h3>Key Changes:</h3>"
            "<ul><li>New simplified UI for ticket creation.</li>"
            "<li>Automated routing to Level 2 support.</li>"
            "<li>Improved SLA tracking dashboard.</li></ul>"
            "<p>Please refer to the training documentation for more details.</p>"
        ),
        "section_id": "euc",
        "subsection_id": "incident-management",
        "author": "alice",
        "age_ms": 10_000_000,
        "image_url": "https://picsum.photos/seed/snow/800/400",
        "allow_comments": True,
        "tags": ["servicenow", "migration"],
    },
    {
        "key": "picnic",
        "title": "Annual Company Picnic",
        "excerpt": "Join us for food, fun, and games at the city park next Friday!",
        "content": (
            "<p>It's that time of year again! The annual company picnic is fast approaching.</p>"
            "<p><strong>When:</strong> Friday, July 24th<br><strong>Where:</strong> Central City Park</p>"
            "<p>Bring your families and enjoy a day of BBQ and team building activities.</p>"
        ),
        "section_id": "general",
        "subsection_id": None,
        "author": "eddie",
        "age_ms": 20_000_000,
        "image_url": "https://picsum.photos/seed/picnic/800/400",
        "allow_comments": True,
        "tags": ["event", "team-building"],
    },
    {
        "key": "benefits",
        "title": "New Health Benefit Options",
        "excerpt": "Open enrollment begins next week. Review the new plans available.",
        "content": "<p>We have added two new provider options for dental and vision.</p>",
        "section_id": "hr",
        "subsection_id": "benefits",
        "author": "alice",
        "age_ms": 86_400_000,
        "image_url": None,
        "allow_comments": False,
        "tags": ["benefits", "hr"],
    },
    {
        "key": "swe",
        "title": "SWE Migration Project Kickoff",
        "excerpt": "The Software Engineering migration to the new VDI environment starts this month.",
        "content": (
            "<h2>SWE Migration Details</h2>"
            "<p>The Field Operations team is preparing to migrate the Software Engineering (SWE) "
            "department to the new high-performance VDI environment.</p>"
            "<p><strong>Timeline:</strong></p>"
            "<ul><li>Pilot Group: June 15th</li><li>Wave 1: June 22nd</li><li>Wave 2: June 29th</li></ul>"
            "<p>Please ensure all data is backed up to OneDrive prior to your scheduled migration slot.</p>"
        ),
        "section_id": "euc",
        "subsection_id": "field-operations",
        "author": "alice",
        "age_ms": 500_000,
        "image_url": "https://picsum.photos/seed/tech/800/400",
        "allow_comments": True,
        "tags": ["migration", "vdi"],
    },
]


async def seed(db: Database, bcrypt_rounds: int) -> bool:
    """Insert the demo rows. Returns False when the database already has users."""
    now = utc_now()
    hasher = PasswordHasher(rounds=bcrypt_rounds)

    async with db.session() as session:
        if await session.scalar(select(func.count()).select_from(User)):
            return False

        users = {}
        for name, email, role, seed_name in USERS:
            users[seed_name] = User(
                id=uuid.uuid4(),
                name=name,
                email=email,
                password_hash=hasher.hash(DEMO_PASSWORD),
                role=role,
                avatar=f"https://picsum.photos/seed/{seed_name}/50/50",
            )
        session.add_all(users.values())

        for position, (section_id, title, subsections) in enumerate(SECTIONS):
            session.add(Section(
                id=section_id,
                title=title,
                position=position,
                subsections=[
                    Subsection(id=sub_id, title=sub_title, position=i)
                    for i, (sub_id, sub_title) in enumerate(subsections)
                ],
            ))
        await session.flush()

        articles = {}
        for entry in ARTICLES:
            author = users[entry["author"]]
            articles[entry["key"]] = Article(
                id=uuid.uuid4(),
                title=entry["title"],
                content=sanitize_article_html(entry["content"]),
                excerpt=entry["excerpt"],
                section_id=entry["section_id"],
                subsection_id=entry["subsection_id"],
                author_id=author.id,
                author_name=author.name,
                timestamp=now - timedelta(milliseconds=entry["age_ms"]),
                image_url=entry["image_url"],
                allow_comments=entry["allow_comments"],
                status=ArticleStatus.PUBLISHED,
                tags=[ArticleTag(tag=tag) for tag in normalize_tags(entry["tags"])],
            )
        session.add_all(articles.values())
        await session.flush()

        john = users["john"]
        session.add(Comment(
            article_id=articles["servicenow"].id,
            author_id=john.id,
            author_name=john.name,
            author_avatar=john.avatar,
            content="This is great news! The new UI looks much cleaner.",
            timestamp=now - timedelta(milliseconds=5_000_000),
        ))
        session.add(SectionEditorGrant(user_id=users["eddie"].id, section_id="euc"))
        session.add(Notification(
            user_id=john.id,
            type=NotificationType.NEW_ARTICLE,
            message='Alice Admin published "SWE Migration Project Kickoff"',
            article_id=articles["swe"].id,
            timestamp=now - timedelta(milliseconds=400_000),
            read=False,
        ))

    return True


async def main() -> None:
    settings = get_settings()
    configure_logging(log_level=settings.log_level, environment=settings.environment, debug=settings.debug)

    db = Database.from_settings(settings)
    try:
        await db.create_all()
        if await seed(db, settings.bcrypt_rounds):
            logger.info("Demo data loaded", extra={"database_url": db.safe_url})
        else:
            logger.info("Database already has users, nothing seeded")
    finally:
        await db.dispose()


if __name__ == "__main__":
    asyncio.run(main())
