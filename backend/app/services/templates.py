from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from app.core.currency import format_amount, format_signed_amount
from app.schemas.stats import PeriodStatsRead
from app.services.windows import DateWindow

TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates" / "emails"


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str


class EmailRenderer:
    """Renders the transactional and digest emails from Jinja2 templates."""

    def __init__(self, app_url: str, brand: str = "Trading Journal") -> None:
        self.app_url = app_url
        self.brand = brand
        self._env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
        )
        self._env.filters["amount"] = format_amount
        self._env.filters["signed_amount"] = format_signed_amount

    def _render(self, template: str, **context: Any) -> str:
        return self._env.get_template(f"{template}.html").render(
            brand=self.brand, app_url=self.app_url, **context
        )

    def registration(self, name: str) -> RenderedEmail:
        return RenderedEmail(
            subject=f"Welcome to {self.brand}! 🎉",
            html=self._render("registration", name=name),
        )

    def mentor_invite(self, mentor_name: str, mentee_email: str) -> RenderedEmail:
        return RenderedEmail(
            subject=f"{mentor_name} invited you to {self.brand}",
            html=self._render("mentor_invite", mentor_name=mentor_name, mentee_email=mentee_email),
        )

    def invite_accepted(self, mentee_name: str) -> RenderedEmail:
        return RenderedEmail(
            subject=f"{mentee_name} accepted your invitation!",
            html=self._render("invite_accepted", mentee_name=mentee_name),
        )

    def daily_target(self, name: str, profit: float, target: float) -> RenderedEmail:
        return RenderedEmail(
            subject="🎯 Daily Target Achieved!",
            html=self._render("daily_target", name=name, profit=profit, target=target),
        )

    def weekly_recap(self, name: str, stats: PeriodStatsRead, window: DateWindow) -> RenderedEmail:
        start, end = window.start.isoformat(), window.end.isoformat()
        return RenderedEmail(
            subject=f"📊 Weekly Recap: {start} - {end}",
            html=self._render("weekly_recap", name=name, stats=stats, start=start, end=end),
        )

    def monthly_report(self, name: str, stats: PeriodStatsRead, window: DateWindow) -> RenderedEmail:
        month_name = window.end.strftime("%B")
        year = window.end.year
        return RenderedEmail(
            subject=f"📈 {month_name} {year} Report",
            html=self._render("monthly_report", name=name, stats=stats, month_name=month_name, year=year),
        )

    def session_reminder(
        self,
        mentee_name: str,
        mentor_name: str,
        when: str,
        topic: str,
        video_link: str | None,
    ) -> RenderedEmail:
        return RenderedEmail(
            subject=f"⏰ Session Tomorrow with {mentor_name}",
            html=self._render(
                "session_reminder",
                mentee_name=mentee_name,
                mentor_name=mentor_name,
                when=when,
                topic=topic,
                video_link=video_link,
            ),
        )

    def verification_code(self, code: str, ttl_minutes: int) -> RenderedEmail:
        return RenderedEmail(
            subject=f"Your {self.brand} verification code",
            html=self._render("verification_code", code=code, ttl_minutes=ttl_minutes),
        )
