"""
focusflow/stores/ - Local state owned by the app.

    activity  - date-keyed DayActivity log
    tasks     - tasks, subtasks, focused task
    notes     - one note per local date
    storage   - sqlite load/save for all of the above
"""
