"""
WeekPlanner: terminal client for planning subject content week by week.
"""
