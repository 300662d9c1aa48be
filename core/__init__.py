"""Core (UI-agnostic) prospecting dashboard logic.

This package contains:
- spreadsheet loading (XLSX/CSV -> list of record mappings)
- field access and date normalization
- stage classification and next-touch resolution
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
