# server/api/__init__.py
