"""Query service: HTTP surface for nlquery."""
