"""Plugins bundled with the bot. Each subdirectory holds one plugin."""
