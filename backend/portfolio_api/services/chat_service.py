"""Keyword chatbot with canned responses and daily usage stats."""
import logging
import random
import re
import time
import uuid
from datetime import timedelta

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portfolio_api.database import upsert
from portfolio_api.models.chat import ChatConversation, ChatDailyStat
from portfolio_api.utils.helpers import utc_now

logger = logging.getLogger(__name__)

# Checked in order; the first category with a matching keyword wins.
CATEGORY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("greeting", ("hello", "hi", "hey", "greet")),
    ("skills", ("skill", "technology", "tech", "programming")),
    ("projects", ("project", "work", "portfolio", "built")),
    ("experience", ("experience", "job", "career", "professional")),
    ("contact", ("contact", "email", "reach", "hire")),
    ("education", ("education", "study", "college", "degree")),
    ("technologies", ("react", "java", "node", "mysql", "javascript", "python")),
]

RESPONSES: dict[str, list[str]] = {
    "greeting": [
        "Hello! Welcome to my portfolio. Ask me about my skills, projects or experience.",
        "Hi there! What would you like to know about my work?",
        "Hey! Happy to help you find your way around. Try asking about projects or skills.",
    ],
    "skills": [
        "I work across the stack: frontend frameworks, backend APIs and relational databases. "
        "The Skills section lists everything with proficiency levels.",
        "My core skills are web development, API design and data modelling. Check the Skills page for details.",
    ],
    "projects": [
        "You can browse my projects in the Projects section, each with a description, tech stack and links.",
        "I've built web apps, APIs and tooling. The featured projects are a good place to start.",
    ],
    "experience": [
        "My professional journey is on the Journey page, from education through work experience.",
        "Take a look at the Journey timeline for my roles and achievements.",
    ],
    "contact": [
        "The best way to reach me is the contact form. I usually reply within 24-48 hours.",
        "Interested in working together? Send a message through the Contact page.",
    ],
    "education": [
        "My education history is part of the Journey timeline.",
        "You'll find my degrees and courses on the Journey page under education.",
    ],
    "technologies": [
        "I use that regularly! The Skills section shows how I rate myself on each technology.",
        "Yes, that's part of my toolkit. Several projects in the Projects section use it.",
    ],
    "default": [
        "I'm not sure I understood. Try asking about my skills, projects, experience or how to contact me.",
        "Could you rephrase that? I can tell you about projects, skills, education or experience.",
    ],
}

RECENT_LIMIT = 10
TOP_CATEGORY_LIMIT = 5
TREND_DAYS = 7


def categorize_message(message: str) -> str:
    words = re.findall(r"[a-z]+", message.lower())
    for category, keywords in CATEGORY_KEYWORDS:
        for keyword in keywords:
            # short keywords must match a whole word ("hi" is not "this")
            if any(w == keyword or (len(keyword) > 3 and w.startswith(keyword)) for w in words):
                return category
    return "default"


def pick_response(category: str) -> str:
    return random.choice(RESPONSES.get(category) or RESPONSES["default"])


def new_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


async def _bump_daily_stats(db: AsyncSession, new_session: bool) -> None:
    today = utc_now().date()
    stmt = upsert(
        db,
        ChatDailyStat,
        ["date"],
        {"date": today, "total_messages": 1, "unique_sessions": 1},
        {
            "total_messages": ChatDailyStat.total_messages + 1,
            "unique_sessions": ChatDailyStat.unique_sessions + (1 if new_session else 0),
        },
    )
    await db.execute(stmt)


async def handle_message(db: AsyncSession, message: str, session_id: str | None) -> ChatConversation:
    text = message.strip()
    session = session_id or new_session_id()
    category = categorize_message(text)
    reply = pick_response(category)

    today = utc_now().date()
    earlier_today = (await db.execute(
        select(func.count(ChatConversation.id)).where(
            ChatConversation.session_id == session,
            func.date(ChatConversation.created_at) == today,
        )
    )).scalar() or 0

    exchange = ChatConversation(
        session_id=session, user_message=text, bot_response=reply, category=category,
    )
    db.add(exchange)
    await db.flush()
    await _bump_daily_stats(db, new_session=earlier_today == 0)
    await db.refresh(exchange)
    logger.debug("Chat message in %s categorised as %s", session, category)
    return exchange


async def chat_stats(db: AsyncSession) -> dict:
    today = utc_now().date()
    total = (await db.execute(select(func.count(ChatConversation.id)))).scalar() or 0
    today_count = (await db.execute(
        select(func.count(ChatConversation.id)).where(func.date(ChatConversation.created_at) == today)
    )).scalar() or 0
    sessions = (await db.execute(select(func.count(distinct(ChatConversation.session_id))))).scalar() or 0

    count_col = func.count(ChatConversation.id).label("count")
    categories = (await db.execute(
        select(ChatConversation.category, count_col)
        .group_by(ChatConversation.category)
        .order_by(count_col.desc())
        .limit(TOP_CATEGORY_LIMIT)
    )).all()

    recent = (await db.execute(
        select(ChatConversation).order_by(ChatConversation.created_at.desc()).limit(RECENT_LIMIT)
    )).scalars().all()

    day_col = func.date(ChatConversation.created_at).label("day")
    trend = (await db.execute(
        select(day_col, func.count(ChatConversation.id))
        .where(ChatConversation.created_at >= utc_now() - timedelta(days=TREND_DAYS))
        .group_by(day_col)
        .order_by(day_col.desc())
    )).all()

    return {
        "total_chats": total,
        "today_chats": today_count,
        "unique_sessions": sessions,
        "popular_categories": [{"category": c, "count": n} for c, n in categories],
        "recent_chats": [
            {
                "user_message": c.user_message,
                "bot_response": c.bot_response,
                "category": c.category,
                "created_at": c.created_at,
            }
            for c in recent
        ],
        "chat_trend": [{"date": str(day), "count": n} for day, n in trend],
    }
