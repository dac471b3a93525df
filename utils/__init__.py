"""
utils package

Utility modules for bot internals:
- config.py: environment settings
- logger.py: logging setup
- downloader.py: yt-dlp, aiohttp and ffmpeg wrappers
- matching.py: catalog search patterns
- pagination.py: result paging and label formatting
- links.py: provider URL recognition
- export.py: CSV user export
"""
