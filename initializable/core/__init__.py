"""Configuration, logging and exceptions shared by the lifecycle package."""
