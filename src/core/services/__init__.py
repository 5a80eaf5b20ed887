"""
Business services for Travexe.

- booking.py: booking creation, lookup, listing and cancellation
- lifecycle.py: status transitions and date rules
- booking_status.py: scheduled completion sweep and trip reminders
- notification.py: in-app notification records
"""

__all__: list[str] = []
