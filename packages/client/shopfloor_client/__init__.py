"""
Shopfloor Hub polling client

Talks to the Shopfloor Hub API and keeps local snapshots of an employee's
notifications and rush-order threads fresh by polling on fixed intervals.
"""

__version__ = "0.1.0"
