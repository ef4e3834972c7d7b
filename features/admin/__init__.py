"""Administrative usage reset endpoints."""
