"""Kedro pipelines for the Stack Exchange topic graph project."""
