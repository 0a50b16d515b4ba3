"""Notion target store: REST client, property and block builders, publisher."""
