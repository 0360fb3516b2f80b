"""Realtime infrastructure (Socket.IO).

One Socket.IO server per process carries every realtime feature: conversation
rooms (new messages, typing indicators, read receipts) and per-user pushes
(notifications, unread counters).
"""
