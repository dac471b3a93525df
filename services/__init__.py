"""
services package

The search / dedup core and its collaborators:
- models.py: origins, catalog entries, search items, outcomes
- errors.py: exception taxonomy
- catalog.py: MongoDB catalog (one collection per namespace)
- users.py: MongoDB user records
- providers.py: JioSaavn, YouTube and Spotify adapters
- aggregator.py: catalog-first search aggregation
- sessions.py: per-chat search sessions with TTL
- publisher.py: Telegram delivery and distribution channel uploads
- fetchers.py: fetch-convert-publish pipeline per namespace
- resolver.py: selection state machine (replay or fetch)
- links.py: pasted provider link routing
- broadcast.py: sequential owner broadcast
"""
