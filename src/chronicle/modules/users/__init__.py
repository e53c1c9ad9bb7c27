"""Users module - identity store and refresh tokens."""

# Module metadata
__module_info__ = {
    "name": "users",
    "version": "1.0.0",
    "description": "Users, passwords and refresh tokens",
    "dependencies": [],
}
