"""SMTP2GO mail gateway adapter."""
