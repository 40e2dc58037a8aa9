"""Synthetic data generation for the continuous and binary scenarios."""

from .synthetic import SyntheticDataGenerator, generate_dataset

__all__ = ["SyntheticDataGenerator", "generate_dataset"]
