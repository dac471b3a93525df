"""
handlers package

Contains aiogram routers for different bot functionalities:
- start.py: /start, /help, /stats and membership checks
- admin.py: owner-only /broadcast, /users, /export
- buttons.py: search listing callbacks (play, page, cancel)
- links.py: pasted YouTube, JioSaavn and Spotify links
- search.py: free-text song search
- middlewares.py: user tracking and force-join gate
"""
