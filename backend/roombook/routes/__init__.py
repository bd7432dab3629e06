# backend/roombook/routes/__init__.py
