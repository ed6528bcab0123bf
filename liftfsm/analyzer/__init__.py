"""
Controller Run Analyzer

Statistics: records broker traffic into an event log, trajectories and
request service times.
"""

from .statistics import Statistics

__all__ = ['Statistics']
