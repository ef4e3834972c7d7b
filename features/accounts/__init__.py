"""User accounts: ORM model, repository and login endpoint."""
