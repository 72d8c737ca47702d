"""Utility helpers shared by services.

Includes ID generation, atomic JSON file IO for the local document
store, and calendar/date helpers used by progress calculations.
"""
