"""
Salon booking backend: booking lifecycle, availability and loyalty.

Services take an explicit SQLAlchemy session; build one with
``salon_booking.database.create_db_engine`` and ``create_session_factory``.
"""

__version__ = "0.1.0"
