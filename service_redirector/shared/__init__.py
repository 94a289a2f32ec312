"""Shared configuration, logging and lookup helpers for the service redirector."""
