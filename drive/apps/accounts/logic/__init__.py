"""Business logic for accounts: registration, login and API tokens."""
