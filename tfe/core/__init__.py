"""Configuration, exceptions and logging shared by the client."""
