"""LMS query core: paginated, role-scoped read access to courses, modules and activities."""
