"""Cockpit trainer web application."""
