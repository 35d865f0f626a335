"""Training loop, schedules and pipeline assembly."""
