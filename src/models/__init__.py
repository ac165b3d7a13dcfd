"""Data models shared by the generation core."""
