# duobrain/services/insights.py
"""AI-backed insights.

The user's financial state is first reduced to short factual statements
(`collect_facts`). With a generative-text API key configured, those facts are
sent to the model, which answers with a JSON list of {title, description}
tips; without a key the facts themselves are returned. Either way the result
is cached per user for SHORT_TTL.
"""
import json
import logging
import re
from datetime import timedelta
from typing import Any, Dict, List, Tuple

import requests
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from duobrain.core import clock
from duobrain.core.config import SimpleSettings
from duobrain.core.errors import ExternalServiceError
from duobrain.core.principal import Principal
from duobrain.db import models
from duobrain.schemas.insight import Insight, InsightsOut
from duobrain.services import charges, recurring
from duobrain.services.cache import SHORT_TTL, ResponseCache, insights_key
from duobrain.services.profile import load_user
from duobrain.services.transactions import EXPENSE_TYPES, INCOME_TYPES, month_bounds, monthly_totals

logger = logging.getLogger(__name__)

MAX_INSIGHTS = 6

PROMPT = """You are a friendly personal-finance coach inside a budgeting app.
Here are facts about one user's finances (amounts in INR):

{facts}

Write between 3 and {limit} short, specific, encouraging insights or tips based only on these facts.
Answer with a JSON array only, no prose, where each element is an object with
"title" (max 5 words, may end with one emoji) and "description" (one sentence)."""


def _inr(amount: float) -> str:
    return f"₹{amount:,.0f}"


def collect_facts(db: Session, principal: Principal) -> List[Tuple[str, str]]:
    """(title, statement) pairs describing the user's current month and savings."""
    now = clock.utcnow()
    user = load_user(db, principal)
    facts: List[Tuple[str, str]] = []

    totals = monthly_totals(db, user.id, now.year, now.month)
    income = sum(totals.get(t, 0.0) for t in INCOME_TYPES)
    spent = sum(totals.get(t, 0.0) for t in EXPENSE_TYPES)
    facts.append(("This month", f"You have recorded {_inr(income)} of income and {_inr(spent)} of expenses this month."))
    if income > 0:
        rate = round((income - spent) / income * 100)
        if rate >= 0:
            facts.append(("Savings rate", f"You are keeping {rate}% of this month's income."))
        else:
            facts.append(("Overspending", f"Your spending is {_inr(spent - income)} above your income this month."))

    start, end = month_bounds(now.year, now.month)
    top = db.execute(
        select(models.Transaction.category, func.sum(models.Transaction.amount).label("total"))
        .where(
            models.Transaction.user_id == user.id,
            models.Transaction.type == models.TransactionType.expense,
            models.Transaction.transaction_date >= start,
            models.Transaction.transaction_date < end,
        )
        .group_by(models.Transaction.category)
        .order_by(func.sum(models.Transaction.amount).desc())
        .limit(1)
    ).first()
    if top is not None:
        facts.append(("Top category", f"Your biggest spending category this month is {top.category} at {_inr(float(top.total))}."))

    recurring_income, recurring_expense = recurring.recurring_totals(user)
    if recurring_expense > 0:
        facts.append((
            "Fixed costs",
            f"Your recurring expenses add up to {_inr(float(recurring_expense))} a month "
            f"against {_inr(float(recurring_income))} of regular income.",
        ))

    jars = db.execute(select(models.Jar).where(models.Jar.user_id == user.id)).scalars().all()
    for jar in jars:
        pct = round(float(jar.amount_saved) / float(jar.goal_amount) * 100) if jar.goal_amount else 0
        facts.append(("Jar progress", f"Your '{jar.jar_name}' jar holds {_inr(float(jar.amount_saved))}, {pct}% of its {_inr(float(jar.goal_amount))} target."))

    open_goals = db.execute(
        select(models.Goal)
        .where(models.Goal.user_id == user.id, models.Goal.status == models.GoalStatus.in_progress)
        .order_by(models.Goal.target_date)
    ).scalars().all()
    for goal in open_goals[:3]:
        remaining = float(goal.target_amount) - float(goal.amount_saved)
        facts.append(("Goal ahead", f"Goal '{goal.goal_name}' needs {_inr(remaining)} more by {goal.target_date.date().isoformat()}."))

    due = db.execute(
        select(func.count(models.UpcomingCharge.id), func.sum(models.UpcomingCharge.amount)).where(
            models.UpcomingCharge.user_id == user.id, models.UpcomingCharge.status == models.ChargeStatus.due
        )
    ).one()
    if due[0]:
        facts.append(("Bills overdue", f"You have {due[0]} overdue bill(s) totalling {_inr(float(due[1] or 0))}."))

    soon = db.execute(
        select(func.count(models.UpcomingCharge.id)).where(
            models.UpcomingCharge.user_id == user.id,
            models.UpcomingCharge.status == models.ChargeStatus.upcoming,
            models.UpcomingCharge.due_date < now + timedelta(days=7),
        )
    ).scalar_one()
    if soon:
        facts.append(("Bills this week", f"{soon} bill(s) fall due within the next 7 days."))

    return facts


def _extract_json_array(text: str) -> List[Dict[str, Any]]:
    # models sometimes wrap JSON in ``` fences
    cleaned = re.sub(r"^```(?:json)?\s*|\s*```$", "", text.strip())
    data = json.loads(cleaned)
    if isinstance(data, dict):
        data = data.get("insights", [])
    if not isinstance(data, list):
        raise ValueError("model answer is not a JSON array")
    return data


def ask_model(settings: SimpleSettings, facts: List[Tuple[str, str]]) -> List[Insight]:
    prompt = PROMPT.format(facts="\n".join(f"- {text}" for _, text in facts), limit=MAX_INSIGHTS)
    url = settings.GENAI_API_URL.format(model=settings.GENAI_MODEL)
    body = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {"responseMimeType": "application/json", "temperature": 0.7},
    }
    try:
        resp = requests.post(url, params={"key": settings.GENAI_API_KEY}, json=body, timeout=settings.GENAI_TIMEOUT)
        resp.raise_for_status()
        text = resp.json()["candidates"][0]["content"]["parts"][0]["text"]
        items = _extract_json_array(text)
        return [Insight.model_validate(item) for item in items[:MAX_INSIGHTS]]
    except (requests.RequestException, KeyError, IndexError, TypeError, ValueError, ValidationError) as exc:
        logger.exception("Insight generation failed")
        raise ExternalServiceError("Failed to generate insights.") from exc


def get_insights(db: Session, cache: ResponseCache, principal: Principal, settings: SimpleSettings) -> Any:
    charges.sweep_overdue(db, cache, principal)

    def load() -> InsightsOut:
        facts = collect_facts(db, principal)
        if settings.GENAI_API_KEY:
            data = ask_model(settings, facts)
        else:
            data = [Insight(title=title, description=text) for title, text in facts[:MAX_INSIGHTS]]
        return InsightsOut(message="Insights fetched successfully!", data=data)

    return cache.get_or_load(insights_key(principal.email), SHORT_TTL, load)
