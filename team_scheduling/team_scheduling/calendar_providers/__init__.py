"""
Calendar Providers Module

Provides adapters that read busy time from external calendars:
- Base adapter interface (base.py)
- Factory for getting the right adapter (factory.py)
- Google Calendar implementation (google_calendar.py)
- Microsoft Outlook implementation (microsoft_outlook.py)
"""
