"""Plain-text user context handed to an external chat model."""

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from moodtrack.db.models import HealthDataEntry, MoodEntry, User
from moodtrack.locale import mood_label, translate


def _avg(values: Sequence[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


def _fmt(value: float | None, decimals: int, language: str) -> str:
    if value is None:
        return translate("ctx_not_available", language)
    return f"{value:.{decimals}f}"


def _profile_value(value: object, unit: str, language: str) -> str:
    if value is None:
        return translate("ctx_unknown", language)
    return f"{value} {unit}".strip()


def build_context(
    user: User,
    mood_entries: Iterable[MoodEntry],
    health_entries: Iterable[HealthDataEntry],
    days_back: int = 14,
    now: datetime | None = None,
    language: str = "de",
) -> str:
    """Summarize the profile and the last ``days_back`` days as text.

    Every value line is always present; missing data renders as a
    placeholder. Inputs are only read.
    """
    end = now or datetime.now()
    start = end - timedelta(days=days_back)

    moods = sorted(
        (e for e in mood_entries if start <= e.date <= end), key=lambda e: e.date
    )
    health = [e for e in health_entries if start <= e.date <= end]

    mood_avg = _avg([e.mood.score for e in moods])
    sleep_avg = _avg([e.sleep_hours for e in health if e.sleep_hours is not None])
    steps_avg = _avg([float(e.steps) for e in health if e.steps is not None and e.steps > 0])
    kcal_avg = _avg([e.calories for e in health if e.calories is not None])
    water_avg = _avg([e.water_intake for e in health if e.water_intake is not None])

    if moods:
        last = moods[-1]
        last_mood = translate(
            "ctx_mood_detail",
            language,
            label=mood_label(last.mood, language),
            intensity=last.intensity,
        )
    else:
        last_mood = translate("ctx_no_moods", language)

    def t(key: str) -> str:
        return translate(key, language)

    lines = [
        t("ctx_profile"),
        f"- {t('ctx_name')}: {user.name}",
        f"- {t('ctx_age')}: {_profile_value(user.age, '', language)}",
        f"- {t('ctx_weight')}: {_profile_value(user.weight, 'kg', language)}",
        f"- {t('ctx_height')}: {_profile_value(user.height, 'cm', language)}",
        f"- {t('ctx_gender')}: {_profile_value(user.gender, '', language)}",
        "",
        f"{t('ctx_last_mood')}: {last_mood}",
        "",
        translate("ctx_trends", language, days=days_back),
        f"- {t('ctx_mood_avg')}: {_fmt(mood_avg, 1, language)}",
        f"- {t('ctx_steps_avg')}: {_fmt(steps_avg, 0, language)}",
        f"- {t('ctx_calories_avg')}: {_fmt(kcal_avg, 0, language)}",
        f"- {t('ctx_sleep_avg')}: {_fmt(sleep_avg, 1, language)}",
        f"- {t('ctx_water_avg')}: {_fmt(water_avg, 1, language)}",
        "",
        t("ctx_rules"),
        f"- {t('ctx_rule_diagnosis')}",
        f"- {t('ctx_rule_suggestions')}",
    ]
    return "\n".join(lines)
