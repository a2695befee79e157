"""
Service-wide constants
"""

SERVICE_NAME = "starterskalender-backend"
SERVICE_TITLE = "Starterskalender Backend"

# Room/calendar events are created in this timezone on the groupware side
CALENDAR_TIMEZONE = "Europe/Brussels"
