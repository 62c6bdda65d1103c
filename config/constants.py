"""Constants used across the application."""

# list_profiles returns at most this many rows
PROFILE_LIST_LIMIT = 2

# Separator for genre lists passed as a single string
GENRE_SEPARATOR = ","

# Lock taken by create_user so the name check and id assignment are serialized
PROFILES_LOCK_MODE = "SHARE ROW EXCLUSIVE"
