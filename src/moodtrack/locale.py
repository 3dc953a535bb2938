"""User-facing text in German (default) and English."""

from moodtrack.db.models import MoodCategory

DEFAULT_LANGUAGE = "de"

MESSAGES: dict[str, dict[str, str]] = {
    "de": {
        # Insights
        "insight_positive": "Deine Stimmung war in der letzten Woche überwiegend positiv!",
        "insight_challenging": (
            "Du hattest eine herausfordernde Woche. "
            "Denke daran, dir Zeit für dich selbst zu nehmen."
        ),
        "insight_most_common": "Am häufigsten fühltest du dich: {mood}",
        "insight_consistent": "Gut gemacht! Du hast regelmäßig deine Stimmung erfasst.",
        # Context
        "ctx_profile": "Nutzerprofil:",
        "ctx_name": "Name",
        "ctx_age": "Alter",
        "ctx_weight": "Gewicht",
        "ctx_height": "Größe",
        "ctx_gender": "Geschlecht",
        "ctx_unknown": "unbekannt",
        "ctx_last_mood": "Letzter Mood-Check",
        "ctx_no_moods": "Keine Stimmungseinträge.",
        "ctx_mood_detail": "{label} (Intensität {intensity}/10)",
        "ctx_trends": "Trends der letzten {days} Tage:",
        "ctx_mood_avg": "Stimmung Ø (1..10)",
        "ctx_steps_avg": "Schritte Ø",
        "ctx_calories_avg": "Aktive Kalorien Ø",
        "ctx_sleep_avg": "Schlaf Ø (h)",
        "ctx_water_avg": "Wasser Ø (L)",
        "ctx_not_available": "n/a",
        "ctx_rules": "Wichtige Regeln:",
        "ctx_rule_diagnosis": (
            "Gib keine medizinischen Diagnosen. Wenn es dem Nutzer sehr schlecht geht, "
            "nenne eine Nummer, unter der er Hilfe bekommt."
        ),
        "ctx_rule_suggestions": (
            "Wenn die Stimmung länger schlecht ist: sanfte, konkrete Vorschläge "
            "(Spaziergang, Yoga, Freunde, Routine, Schlafhygiene)."
        ),
        # Errors
        "error_load": "Fehler beim Laden der Daten: {error}",
        "error_save": "Fehler beim Speichern: {error}",
        "error_delete": "Fehler beim Löschen: {error}",
        "error_sign_in": "Fehler beim Anmelden: {error}",
        "error_sync": "Fehler beim Synchronisieren: {error}",
        "error_not_signed_in": "Kein Nutzer angemeldet",
        "error_health_unavailable": "Gesundheitsdaten sind nicht verfügbar",
        "error_authorization_denied": "Zugriff auf Gesundheitsdaten wurde verweigert",
        "error_data_type_unavailable": "Dieser Datentyp ist nicht verfügbar",
        "error_invalid_date": "Ungültiges Datum",
        "error_not_found": "Eintrag nicht gefunden",
        "error_name_required": "Der Name darf nicht leer sein",
        "error_storage": "Die lokale Datenbank ist nicht verfügbar",
        "error_unsupported_language": "Sprache wird nicht unterstützt: {code}",
        # Reminders
        "reminder_title": "Wie fühlst du dich heute?",
        "reminder_body": "Nimm dir einen Moment Zeit und protokolliere deinen Tag.",
    },
    "en": {
        "insight_positive": "Your mood was mostly positive over the last week!",
        "insight_challenging": (
            "You had a challenging week. Remember to take some time for yourself."
        ),
        "insight_most_common": "You most often felt: {mood}",
        "insight_consistent": "Well done! You logged your mood regularly.",
        "ctx_profile": "User profile:",
        "ctx_name": "Name",
        "ctx_age": "Age",
        "ctx_weight": "Weight",
        "ctx_height": "Height",
        "ctx_gender": "Gender",
        "ctx_unknown": "unknown",
        "ctx_last_mood": "Last mood check",
        "ctx_no_moods": "No mood entries.",
        "ctx_mood_detail": "{label} (intensity {intensity}/10)",
        "ctx_trends": "Trends over the last {days} days:",
        "ctx_mood_avg": "Mood avg (1..10)",
        "ctx_steps_avg": "Steps avg",
        "ctx_calories_avg": "Active calories avg",
        "ctx_sleep_avg": "Sleep avg (h)",
        "ctx_water_avg": "Water avg (L)",
        "ctx_not_available": "n/a",
        "ctx_rules": "Important rules:",
        "ctx_rule_diagnosis": (
            "Do not give medical diagnoses. If the user is doing very badly, "
            "point them to a number where they can get help."
        ),
        "ctx_rule_suggestions": (
            "If the mood stays low for a while: gentle, concrete suggestions "
            "(walk, yoga, friends, routine, sleep hygiene)."
        ),
        "error_load": "Failed to load data: {error}",
        "error_save": "Failed to save: {error}",
        "error_delete": "Failed to delete: {error}",
        "error_sign_in": "Sign-in failed: {error}",
        "error_sync": "Sync failed: {error}",
        "error_not_signed_in": "No user signed in",
        "error_health_unavailable": "Health data is not available",
        "error_authorization_denied": "Access to health data was denied",
        "error_data_type_unavailable": "This data type is not available",
        "error_invalid_date": "Invalid date",
        "error_not_found": "Entry not found",
        "error_name_required": "Name must not be empty",
        "error_storage": "The local database is not available",
        "error_unsupported_language": "Unsupported language: {code}",
        "reminder_title": "How are you feeling today?",
        "reminder_body": "Take a moment to log your day.",
    },
}

MOOD_LABELS_EN = {
    MoodCategory.VERY_HAPPY: "Very happy",
    MoodCategory.HAPPY: "Happy",
    MoodCategory.NEUTRAL: "Neutral",
    MoodCategory.SAD: "Sad",
    MoodCategory.VERY_SAD: "Very sad",
    MoodCategory.ANXIOUS: "Anxious",
    MoodCategory.STRESSED: "Stressed",
    MoodCategory.CALM: "Calm",
    MoodCategory.ENERGETIC: "Energetic",
    MoodCategory.TIRED: "Tired",
}

SUPPORTED_LANGUAGES = frozenset(MESSAGES)


def resolve_language(language: str | None) -> str:
    """Map a language code to a supported one, falling back to German."""
    code = (language or DEFAULT_LANGUAGE).replace("_", "-").split("-")[0].lower()
    return code if code in MESSAGES else DEFAULT_LANGUAGE


def translate(key: str, language: str | None = None, **kwargs: object) -> str:
    text = MESSAGES[resolve_language(language)][key]
    return text.format(**kwargs) if kwargs else text


def mood_label(mood: MoodCategory, language: str | None = None) -> str:
    if resolve_language(language) == "en":
        return MOOD_LABELS_EN[mood]
    return mood.label
