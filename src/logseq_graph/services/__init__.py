"""File safety services shared by pages and transactions."""
