"""Onboarding module: stage machine, task templates and service operations."""
