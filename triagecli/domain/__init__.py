"""Domain Layer: patient records, scoring rules, events and ports."""
