"""Catalog of pre-configured household event templates."""

from __future__ import annotations

from datetime import datetime, timedelta

from homecal.domain.models import (
    EventTemplate,
    TemplateCategory,
    TemplateEventData,
    TemplateReminder,
)

_ONE_HOUR = TemplateReminder(minutes_before=60)
_ONE_DAY_EMAIL = TemplateReminder(minutes_before=1440, method="email")
_ONE_WEEK_EMAIL = TemplateReminder(minutes_before=10080, method="email")

EVENT_TEMPLATES: tuple[EventTemplate, ...] = (
    # Family
    EventTemplate(
        id="family-dinner",
        name="Family Dinner",
        description="Weekly family dinner together",
        category=TemplateCategory.FAMILY,
        duration=90,
        rrule="FREQ=WEEKLY;BYDAY=SU",
        location="Home",
        reminders=(_ONE_HOUR,),
        color="#FF6B6B",
    ),
    EventTemplate(
        id="family-meeting",
        name="Family Meeting",
        description="Weekly family meeting to discuss household matters",
        category=TemplateCategory.FAMILY,
        duration=60,
        rrule="FREQ=WEEKLY;BYDAY=SU",
        location="Living Room",
        reminders=(TemplateReminder(minutes_before=30),),
        color="#4ECDC4",
    ),
    # Health
    EventTemplate(
        id="gym-session",
        name="Gym Session",
        description="Regular workout session",
        category=TemplateCategory.HEALTH,
        duration=60,
        rrule="FREQ=WEEKLY;BYDAY=MO,WE,FR",
        location="Gym",
        reminders=(TemplateReminder(minutes_before=15),),
        color="#45B7D1",
    ),
    EventTemplate(
        id="doctor-appointment",
        name="Doctor Appointment",
        description="Regular health checkup",
        category=TemplateCategory.HEALTH,
        duration=30,
        rrule="FREQ=MONTHLY",
        location="Medical Center",
        reminders=(_ONE_DAY_EMAIL, _ONE_HOUR),
        color="#96CEB4",
    ),
    # Maintenance
    EventTemplate(
        id="garden-maintenance",
        name="Garden Maintenance",
        description="Weekly garden care and maintenance",
        category=TemplateCategory.MAINTENANCE,
        duration=120,
        rrule="FREQ=WEEKLY;BYDAY=SA",
        location="Garden",
        reminders=(_ONE_HOUR,),
        color="#6BCF7F",
    ),
    EventTemplate(
        id="deep-clean",
        name="Deep Clean",
        description="Monthly deep cleaning session",
        category=TemplateCategory.MAINTENANCE,
        duration=240,
        rrule="FREQ=MONTHLY;BYDAY=1SA",
        location="Home",
        reminders=(TemplateReminder(minutes_before=1440),),
        color="#FFD93D",
    ),
    # Shopping and meals
    EventTemplate(
        id="grocery-shopping",
        name="Grocery Shopping",
        description="Weekly grocery shopping trip",
        category=TemplateCategory.SHOPPING,
        duration=90,
        rrule="FREQ=WEEKLY;BYDAY=SA",
        location="Supermarket",
        reminders=(_ONE_HOUR,),
        color="#FF8C42",
    ),
    EventTemplate(
        id="meal-prep",
        name="Meal Prep",
        description="Weekly meal preparation session",
        category=TemplateCategory.MEAL,
        duration=180,
        rrule="FREQ=WEEKLY;BYDAY=SU",
        location="Kitchen",
        reminders=(TemplateReminder(minutes_before=30),),
        color="#FF6B9D",
    ),
    # Social
    EventTemplate(
        id="date-night",
        name="Date Night",
        description="Weekly date night with partner",
        category=TemplateCategory.SOCIAL,
        duration=180,
        rrule="FREQ=WEEKLY;BYDAY=FR",
        location="Restaurant",
        reminders=(_ONE_HOUR,),
        color="#C44569",
    ),
    EventTemplate(
        id="friends-gathering",
        name="Friends Gathering",
        description="Monthly get-together with friends",
        category=TemplateCategory.SOCIAL,
        duration=240,
        rrule="FREQ=MONTHLY;BYDAY=1SA",
        location="Home",
        reminders=(_ONE_DAY_EMAIL, _ONE_HOUR),
        color="#F8B500",
    ),
    # Work
    EventTemplate(
        id="work-from-home",
        name="Work from Home",
        description="Remote work day",
        category=TemplateCategory.WORK,
        duration=480,
        rrule="FREQ=WEEKLY;BYDAY=MO,TU,WE,TH,FR",
        location="Home Office",
        reminders=(TemplateReminder(minutes_before=30),),
        color="#6C5CE7",
    ),
    EventTemplate(
        id="project-review",
        name="Project Review",
        description="Weekly project status review",
        category=TemplateCategory.WORK,
        duration=60,
        rrule="FREQ=WEEKLY;BYDAY=FR",
        location="Home Office",
        reminders=(TemplateReminder(minutes_before=15),),
        color="#A29BFE",
    ),
    # All-day
    EventTemplate(
        id="birthday",
        name="Birthday Celebration",
        description="Birthday celebration",
        category=TemplateCategory.FAMILY,
        duration=0,
        rrule="FREQ=YEARLY",
        location="Home",
        reminders=(_ONE_WEEK_EMAIL, TemplateReminder(minutes_before=1440)),
        color="#FD79A8",
        is_all_day=True,
    ),
    EventTemplate(
        id="anniversary",
        name="Anniversary",
        description="Anniversary celebration",
        category=TemplateCategory.FAMILY,
        duration=0,
        rrule="FREQ=YEARLY",
        location="Home",
        reminders=(_ONE_WEEK_EMAIL, TemplateReminder(minutes_before=1440)),
        color="#E84393",
        is_all_day=True,
    ),
    EventTemplate(
        id="holiday",
        name="Public Holiday",
        description="Public holiday - no work",
        category=TemplateCategory.FAMILY,
        duration=0,
        rrule="FREQ=YEARLY",
        location="Home",
        reminders=(TemplateReminder(minutes_before=1440),),
        color="#00B894",
        is_all_day=True,
    ),
)

_BY_ID = {template.id: template for template in EVENT_TEMPLATES}


def by_category(category: TemplateCategory | str) -> list[EventTemplate]:
    return [t for t in EVENT_TEMPLATES if t.category == category]


def by_id(template_id: str) -> EventTemplate | None:
    return _BY_ID.get(template_id)


def categories() -> list[TemplateCategory]:
    """Return the categories used by the catalog, in first-seen order."""
    return list(dict.fromkeys(t.category for t in EVENT_TEMPLATES))


def suggest(at: datetime) -> list[EventTemplate]:
    """Suggest templates for the hour and weekday of *at*.

    Morning (6-11), afternoon (12-17) and evening (18-21) bands each add a
    set of categories, weekends add more. Duplicates are dropped, keeping
    the first position.
    """
    hour = at.hour
    suggestions: list[EventTemplate] = []

    if 6 <= hour < 11:
        suggestions += by_category(TemplateCategory.HEALTH)
        suggestions += [
            t for t in by_category(TemplateCategory.WORK) if t.id != "work-from-home"
        ]

    if 12 <= hour < 17:
        suggestions += by_category(TemplateCategory.WORK)
        suggestions += by_category(TemplateCategory.SHOPPING)

    if 18 <= hour < 21:
        suggestions += by_category(TemplateCategory.FAMILY)
        suggestions += by_category(TemplateCategory.SOCIAL)

    if at.weekday() >= 5:  # Saturday, Sunday
        suggestions += by_category(TemplateCategory.MAINTENANCE)
        suggestions += by_category(TemplateCategory.FAMILY)
        suggestions += by_category(TemplateCategory.SOCIAL)

    unique: dict[str, EventTemplate] = {}
    for template in suggestions:
        unique.setdefault(template.id, template)
    return list(unique.values())


def template_to_event(template: EventTemplate, start: datetime) -> TemplateEventData:
    """Pre-fill event fields from *template*, starting at *start*."""
    return TemplateEventData(
        title=template.name,
        description=template.description,
        start_time=start,
        end_time=start + timedelta(minutes=template.duration),
        event_type=template.category,
        location=template.location,
        rrule=template.rrule,
        is_all_day=template.is_all_day,
    )
