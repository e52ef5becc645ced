"""Development helpers: opt-in timing instrumentation via ``NEURODETECT_DEBUG``."""
