"""Booking and administration backend for a small-business website."""
