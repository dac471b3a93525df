"""
lunemusic package

Root package for the Telegram music search and delivery bot.
Contains:
- bot.py entrypoint
- handlers for user commands, searches, links and callbacks
- services for the catalog, providers, search sessions and delivery
- utils for config, downloads, matching and logging
- templates for messages and keyboards
"""
