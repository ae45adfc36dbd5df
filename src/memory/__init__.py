"""Conversational memory: capture finished turns, recall context for new ones."""
