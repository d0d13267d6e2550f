"""
Core domain records for Kaizen-PIs.

- entities: KPI definitions, conversion rules, logs and patches
- dates: calendar-tagged dates and their comparator
- schemas: validated payload models for the exchange format
- exceptions: the engine's error taxonomy
"""
