"""Offboarding module: status evaluation, completion orchestration and exports."""
