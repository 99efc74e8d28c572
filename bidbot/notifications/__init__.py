"""Notifications module - outcome reporting."""

from bidbot.notifications.telegram import TelegramNotifier, build_application_message

__all__ = ["TelegramNotifier", "build_application_message"]
