"""Shared configuration and observability services."""
