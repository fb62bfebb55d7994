"""Core (UI-agnostic) logic for the border smuggling price dashboard.

This package contains:
- data loading (CSV -> pandas -> DataPoint records)
- filter normalization
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
- tooltip placement for the point detail popup
"""
