"""
focusflow/stats/ - Derived statistics. Everything here is a pure function
over a snapshot of the activity log (plus tasks for completed titles).

    summary   - streaks, today/week rollups, per-day month summaries
    calendar  - heat-map intensity, week ranges, grid cells, range insights
    context   - focus context handed to insight generation
"""
