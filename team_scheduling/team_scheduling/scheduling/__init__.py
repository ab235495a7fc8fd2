"""
Scheduling Services Module

This module provides core business logic for team scheduling:
- Interval math (intervals.py)
- Busy time aggregation across calendars (busy.py)
- Recurrence expansion (recurrence.py)
- Bookable slot generation (availability.py)
- Multi-person optimal slot search (optimal.py)
- Conflict grouping for calendar views (conflicts.py)
- Working-hours overlap across timezones (timezones.py)
"""
