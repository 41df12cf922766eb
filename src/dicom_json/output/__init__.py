"""Aggregation, rendering and persistence of extracted instances."""
