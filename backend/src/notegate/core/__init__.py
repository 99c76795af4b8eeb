"""Core domain: models, policy, repositories, schemas and services."""
