"""Consumer loan tracking: origination, payment schedules and payment status."""

__version__ = "0.1.0"
